"""
shopledger.commerce

Cart and ledger domain.

Responsibilities:
- Typed records (products, line items, transactions).
- Pure reducers/aggregations the controller applies to its in-memory state.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing in this package touches persistence or the network.
