"""
shopledger.auth

Authentication package.

Responsibilities:
- Identity model and token helpers.
- Credential holder (access/refresh tokens + cached identity snapshot).
- Local registration input validation.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Credential storage is delegated to the identity provider; this package never stores passwords.
