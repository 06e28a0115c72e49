"""TaskFlow: task list manager backed by a hosted record store."""

__version__ = "0.1.0"
