"""Traversal and scheduling of the rewrite pipeline."""

from text_linkify.controller.controller import LinkifyController, LinkifyStats

__all__ = [
    "LinkifyController",
    "LinkifyStats",
]
