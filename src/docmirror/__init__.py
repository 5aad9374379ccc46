"""
docmirror: Mirror a document's tab hierarchy into a folder tree of rendered files.

The source document is always authoritative. Each run reconciles the
destination tree against it and remembers what it did, so repeated runs
converge without duplicating work.
"""

__version__ = "0.3.0"
