"""
shopledger

Session and state core for a storefront with a personal-finance ledger, plus the
transactional email relay it talks to.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
