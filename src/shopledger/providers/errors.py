"""
shopledger.providers.errors

Exceptions raised across provider boundaries.
"""

from __future__ import annotations


class UnsupportedOperationError(Exception):
    """A provider was asked for a capability it does not implement."""

    def __init__(self, provider: str, operation: str) -> None:
        super().__init__(f"{provider} does not support {operation}")
        self.provider = provider
        self.operation = operation


class IdentityProviderError(Exception):
    """Provider call failed; `str(exc)` is safe to show to the user."""


class DocumentStoreError(Exception):
    pass
