"""
shopledger.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Request context propagation for the relay service.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The session core only logs; it never configures logging itself.
