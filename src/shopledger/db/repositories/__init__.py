"""
shopledger.db.repositories

Repository layer for the local store.
"""

# Package marker.
