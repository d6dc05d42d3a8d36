"""Text node rewriting."""

from text_linkify.rewriter.node_rewriter import NodeRewriter

__all__ = [
    "NodeRewriter",
]
