"""
shopledger.db

Local persistence layer (SQLAlchemy).

Responsibilities:
- ORM base/model for the local key-value table.
- Engine/session factory helpers and dev/test schema bootstrap.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Only `storage.kv.SqlKeyValueStore` talks to this package; the controller never does.
