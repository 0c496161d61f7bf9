"""
shopledger.storage

Local persistence primitives used by the session controller.

Responsibilities:
- Best-effort JSON key-value store (never raises).
- Storage key names and the per-scope collection store.
"""

# Package marker.
