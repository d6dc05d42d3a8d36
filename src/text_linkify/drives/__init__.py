"""Cloud-drive provider rules."""

from text_linkify.drives.registry import DriveRegistry, DriveRule

__all__ = [
    "DriveRule",
    "DriveRegistry",
]
