"""Rule reloading and serialized refresh."""

import os
import threading
import time
from typing import Callable

from .collector import CollectionResult, collect_ignored
from .config import ExportSettings
from .index import PathIndex
from .matcher import IgnoreMatcher, load_matcher
from .output import Output, get_output

# Polling interval of the watch loop, in seconds
DEFAULT_REFRESH_INTERVAL = 0.5


class ExtractSession:
    """Owns the current matcher and runs collection passes.

    Refreshes never overlap: a request made while another refresh is
    running is dropped.
    """

    def __init__(
        self,
        settings: ExportSettings,
        index: PathIndex | None = None,
        output: Output | None = None,
    ):
        self.settings = settings
        self.index = index
        self.output = output or get_output()
        self.matcher: IgnoreMatcher | None = None
        self.last_result: CollectionResult | None = None
        self._built = False
        self._rules_stamp: tuple[int, int] | None = None
        self._lock = threading.Lock()

    def _stamp(self) -> tuple[int, int] | None:
        try:
            st = os.stat(self.settings.rules_file)
        except OSError:
            return None
        return st.st_mtime_ns, st.st_size

    def rules_changed(self) -> bool:
        """Check if the rule file changed since the last rebuild."""
        if not self._built:
            return True
        return self._stamp() != self._rules_stamp

    def rebuild(self) -> IgnoreMatcher | None:
        """Reload the rule file, discarding the previous matcher.

        Returns:
            New matcher, or None if the rule file is missing
        """
        self._rules_stamp = self._stamp()
        self.matcher = load_matcher(self.settings.rules_file, output=self.output)
        self._built = True
        return self.matcher

    def refresh(self, force: bool = False) -> CollectionResult | None:
        """Run one collection pass, rebuilding rules when needed.

        Args:
            force: Rebuild the matcher even if the rule file is unchanged

        Returns:
            CollectionResult, or None if a refresh was already running
        """
        if not self._lock.acquire(blocking=False):
            self.output.info("Refresh already in progress - skipping")
            return None

        try:
            if force or self.rules_changed():
                self.rebuild()
            elif self.matcher is not None:
                self.matcher.clear_cache()

            result = collect_ignored(
                self.matcher,
                self.settings,
                index=self.index,
                output=self.output,
            )
            self.last_result = result
            return result
        finally:
            self._lock.release()

    def watch(
        self,
        on_change: Callable[[CollectionResult], None],
        interval: float = DEFAULT_REFRESH_INTERVAL,
        max_iterations: int | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Refresh periodically and report changed results.

        Args:
            on_change: Called with each result that differs from the last
            interval: Seconds between refreshes
            max_iterations: Stop after this many refreshes (None = forever)
            sleep: Sleep function (default time.sleep)
        """
        if sleep is None:
            sleep = time.sleep

        previous = None
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            result = self.refresh()
            if result is not None and result != previous:
                on_change(result)
                previous = result

            iterations += 1
            if max_iterations is None or iterations < max_iterations:
                sleep(interval)
