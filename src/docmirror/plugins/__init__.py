# src/docmirror/plugins/__init__.py
"""Concrete collaborators for the engine ports.

The engine never imports from here; the CLI wires adapters in.
"""
