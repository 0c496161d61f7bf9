"""
shopledger.providers

Collaborator boundaries consumed by the session controller.

Responsibilities:
- Identity provider interface + REST and Firebase-backed implementations.
- Document store interface + in-memory and Firestore implementations.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The controller only depends on the base classes; concrete adapters are chosen by the host.
