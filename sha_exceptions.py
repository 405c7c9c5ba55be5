"""Errors raised while selecting a hash family or loading its constant tables."""

from __future__ import annotations


class SecureHashError(Exception):
    def __init__(self, message: str):
        super().__init__(f"Secure hash failure: {message}")


class UnsupportedFamily(SecureHashError, ValueError):
    def __init__(self, family):
        self.family = family
        super().__init__(
            f"unsupported family {family!r} (expected 'SHA-1' or 'SHA-2')"
        )


class MalformedDescriptor(SecureHashError, ValueError):
    def __init__(self, family, reason: str):
        self.family = family
        self.reason = reason
        super().__init__(f"malformed descriptor for {family}: {reason}")
