"""repo-changes: collect a contributor's recently changed files across repositories."""

__version__ = "0.1.0"
