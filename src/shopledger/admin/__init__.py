"""
shopledger.admin

Admin console services.

Responsibilities:
- User-management over the `users` collection of the document store.
- Security settings shared with every session (idle timeout).
"""

# Package marker.
