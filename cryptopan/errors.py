"""
Exceptions raised by the cryptopan package.

All library errors derive from CryptoPAnError. Key and address errors are
also ValueErrors, so callers that only care about "bad input" can catch that.
"""

KEY_SIZE = 32


class CryptoPAnError(Exception):
    """Base class for cryptopan errors."""


class InvalidKeyError(CryptoPAnError, ValueError):
    """
    Malformed key material.

    Raised when a key has the wrong length or is rejected by the cipher.
    Never retried: a bad key is a configuration error.
    """

    def __init__(self, length: int, expected: int = KEY_SIZE, reason: str | None = None):
        self.length = length
        self.expected = expected
        if reason is None:
            reason = f"Invalid key length (must be {expected} bytes), found {length} bytes"
        super().__init__(reason)


class EncryptionError(CryptoPAnError):
    """The block cipher failed to initialize or to encrypt a block."""


class AddressParseError(CryptoPAnError, ValueError):
    """Text could not be parsed as an IPv4 or IPv6 address."""

    def __init__(self, address: str, reason: str | None = None):
        self.address = address
        message = f"Invalid IP address: {address!r}"
        if reason is not None:
            message = f"{message} ({reason})"
        super().__init__(message)
