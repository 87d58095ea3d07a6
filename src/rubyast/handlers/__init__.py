"""Raw node handlers for the rewriter, grouped by construct."""

__all__ = [
    "assignment",
    "blocks",
    "calls",
    "conditionals",
    "helpers",
    "literals",
    "loops",
    "methods",
    "operators",
    "patterns",
    "strings",
    "structure",
]
