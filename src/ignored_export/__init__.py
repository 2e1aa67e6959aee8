"""ignored-export: collect the paths a .gitignore ignores and copy them out."""

__version__ = "0.1.0"
