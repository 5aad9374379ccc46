# src/docmirror/core/properties.py
"""SQL-backed property store.

A flat string key/value table. Every call runs in its own transaction,
so each write is all-or-nothing: a process killed mid-save leaves the
previous value in place.

Well-known keys are defined here so every component agrees on them.
"""

from datetime import UTC, datetime
from typing import Final

from sqlalchemy import delete, select, update

from docmirror.core.database import StateDB
from docmirror.core.schema import properties_table

LOCK_KEY: Final = "run_lock"
STATE_KEY: Final = "sync_state"
FINGERPRINT_PREFIX: Final = "hash_"
LAST_RUN_KEY: Final = "last_run_at"


def fingerprint_key(node_id: str) -> str:
    return f"{FINGERPRINT_PREFIX}{node_id}"


class SqlPropertyStore:
    """PropertyStore implementation over the state database."""

    def __init__(self, db: StateDB) -> None:
        self._db = db

    def get_property(self, key: str) -> str | None:
        with self._db.engine.connect() as conn:
            row = conn.execute(select(properties_table.c.value).where(properties_table.c.key == key)).fetchone()
        return None if row is None else str(row.value)

    def set_property(self, key: str, value: str) -> None:
        now = datetime.now(UTC)
        # begin() auto-commits on clean exit, auto-rollbacks on exception
        with self._db.engine.begin() as conn:
            result = conn.execute(
                update(properties_table).where(properties_table.c.key == key).values(value=value, updated_at=now)
            )
            if result.rowcount == 0:
                conn.execute(properties_table.insert().values(key=key, value=value, updated_at=now))

    def delete_property(self, key: str) -> None:
        with self._db.engine.begin() as conn:
            conn.execute(delete(properties_table).where(properties_table.c.key == key))

    def delete_all_properties(self) -> None:
        with self._db.engine.begin() as conn:
            conn.execute(delete(properties_table))

    def keys(self, prefix: str = "") -> list[str]:
        query = select(properties_table.c.key).order_by(properties_table.c.key)
        if prefix:
            query = query.where(properties_table.c.key.startswith(prefix, autoescape=True))
        with self._db.engine.connect() as conn:
            return [str(row.key) for row in conn.execute(query)]
