"""Hosting document environment: tree, observers and scheduling."""

from text_linkify.dom.host import DocumentHost
from text_linkify.dom.observers import (
    MutationKind,
    MutationRecord,
    MutationSource,
    VisibilityObserver,
    always_visible,
)
from text_linkify.dom.scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    "DocumentHost",
    "MutationKind",
    "MutationRecord",
    "MutationSource",
    "VisibilityObserver",
    "always_visible",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
]
