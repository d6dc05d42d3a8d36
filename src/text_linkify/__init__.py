"""Plain-text URL linkification with cloud-drive access-code recovery."""

__version__ = "0.1.0"
