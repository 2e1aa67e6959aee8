"""Test fixtures for ignored-export."""

import io

import pytest

from ignored_export.config import ExportSettings
from ignored_export.output import Output, set_output

UNITY_RULES = """\
# Unity
Library/
Temp/
*.user
!important.user
Assets/Generated/
*.tmp
"""


@pytest.fixture
def make_files():
    """Create files (and their parent directories) from a mapping."""

    def _make(root, files):
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _make


@pytest.fixture
def unity_project(tmp_path, make_files):
    """Project with a primary root, hidden folders and sidecar files."""
    project = tmp_path / "project"
    project.mkdir()

    make_files(project, {
        ".gitignore": UNITY_RULES,
        "Assets/Scripts.meta": "guid: scripts",
        "Assets/Scripts/Player.cs": "class Player {}",
        "Assets/Scripts/Player.cs.meta": "guid: player",
        "Assets/Generated.meta": "guid: generated",
        "Assets/Generated/Out.asset": "generated",
        "Assets/Generated/Out.asset.meta": "guid: out",
        "Assets/cache.tmp": "cache",
        "Assets/cache.tmp.meta": "guid: cache",
        "Assets/Samples~/Demo.tmp": "demo",
        "Assets/.hidden/notes.txt": "notes",
        "Library/cache.bin": "bin",
        "proj.user": "user",
        "important.user": "keep",
    })
    (project / "Assets" / "Generated" / "Empty").mkdir()

    return project


@pytest.fixture
def unity_settings(unity_project):
    """Default settings for unity_project."""
    return ExportSettings(
        project_root=unity_project,
        rules_file=unity_project / ".gitignore",
    )


@pytest.fixture
def captured_output():
    """Output handler writing to in-memory streams."""
    return Output(no_color=True, stream=io.StringIO(), err_stream=io.StringIO())


@pytest.fixture(autouse=True)
def default_output():
    """Give every test a fresh default output handler."""
    output = Output(no_color=True)
    set_output(output)
    return output
