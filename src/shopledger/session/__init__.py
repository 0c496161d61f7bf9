"""
shopledger.session

Session lifetime primitives.

Responsibilities:
- Sliding-expiration session timer.
- User-activity sources that keep the timer alive.
"""

# Package marker.
