"""
shopledger.state

The session/state controller and its value types.

Responsibilities:
- One authoritative in-memory model of identity, preferences, ledger and cart.
- Operation results and preference types exposed to the UI layer.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Hosts should import `SessionController` from `shopledger.state.controller`.
