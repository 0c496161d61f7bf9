"""
shopledger.storage.keys

Names of every locally persisted slot.
"""

from __future__ import annotations

THEME_KEY = "pf_theme"
LOCALE_KEY = "pf_locale"
REDUCED_MOTION_KEY = "pf_reduced_motion"
LEDGER_KEY = "pf_tx"
CART_KEY_PREFIX = "pf_cart"

ACCESS_TOKEN_KEY = "auth_token"
REFRESH_TOKEN_KEY = "refresh_token"
IDENTITY_SNAPSHOT_KEY = "user_data"


# --- Module Notes -----------------------------------------------------------
# Renaming a key orphans data already persisted by earlier releases.
