"""
shopledger.api

HTTP surface of the email relay (FastAPI).
"""

# Package marker.
