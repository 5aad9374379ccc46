# src/docmirror/plugins/google/__init__.py
"""Google Docs source, Drive destination and PDF renderer adapters."""

from docmirror.plugins.google.docs import GoogleDocsSource
from docmirror.plugins.google.drive import GoogleDriveBackend
from docmirror.plugins.google.renderer import DocsPdfRenderer
from docmirror.plugins.google.session import GoogleSession

__all__ = [
    "DocsPdfRenderer",
    "GoogleDocsSource",
    "GoogleDriveBackend",
    "GoogleSession",
]
