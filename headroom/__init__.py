"""Context budget analysis and configuration edits for AI assistant projects."""

__version__ = "1.1.1"

__all__ = ["__version__"]
