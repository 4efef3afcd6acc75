"""Half-clone Claude Code sessions into new, independent logs."""

__version__ = "0.1.0"
