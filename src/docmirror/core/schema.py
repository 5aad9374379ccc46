# src/docmirror/core/schema.py
"""SQLAlchemy table definitions for the state database.

Uses SQLAlchemy Core (not ORM) for explicit control over queries
and compatibility with multiple database backends.
"""

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text

# Shared metadata for all tables
metadata = MetaData()

# === Persisted properties (lock, state blob, fingerprints, last run) ===

properties_table = Table(
    "properties",
    metadata,
    Column("key", String(255), primary_key=True),
    Column("value", Text, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

# === Audit log (append-only) ===

audit_log_table = Table(
    "audit_log",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("recorded_at", DateTime(timezone=True), nullable=False),
    Column("action", String(32), nullable=False),
    Column("message", Text, nullable=False),
    Column("status", String(32), nullable=False),
)
