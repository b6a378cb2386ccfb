"""Inkwell: a sandboxed ReAct agent runtime for novel-writing workspaces."""

__version__ = "0.3.0"

__all__ = ["__version__"]
