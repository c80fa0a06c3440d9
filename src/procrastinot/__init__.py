"""Hierarchical to-do manager with tree-aware search."""

__version__ = "0.1.0"
