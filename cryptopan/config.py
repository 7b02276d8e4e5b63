"""
Configuration for building a Scrambler.

Key material is supplied from outside (a hex string, a key file or the
environment); this module only parses and validates it.

Environment:
- CRYPTOPAN_KEY: 64 hex digits (32 bytes)
- CRYPTOPAN_BACKEND: encrypter backend name (default: pycryptodome)
"""

from dataclasses import dataclass
import os
from pathlib import Path
from collections.abc import Mapping

from .encrypter import DEFAULT_BACKEND, get_encrypter
from .errors import KEY_SIZE, InvalidKeyError
from .scrambler import Scrambler

ENV_KEY = "CRYPTOPAN_KEY"
ENV_BACKEND = "CRYPTOPAN_BACKEND"

_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")


def parse_hex_key(text: str) -> bytes:
    """
    Parse a hex-encoded 32-byte key.

    Whitespace anywhere in the text is ignored.
    """
    digits = "".join(text.split())
    try:
        key = bytes.fromhex(digits)
    except ValueError as exc:
        raise InvalidKeyError(
            len(digits) // 2, reason=f"Key is not valid hex ({KEY_SIZE * 2} hex digits expected)"
        ) from exc
    if len(key) != KEY_SIZE:
        raise InvalidKeyError(len(key))
    return key


def _is_hex_text(data: bytes) -> bool:
    digits = b"".join(data.split())
    return bool(digits) and all(c in _HEX_DIGITS for c in digits)


def load_key_file(path: str | Path) -> bytes:
    """
    Read a key file.

    The file holds either the key as 64 hex digits (whitespace allowed) or
    the 32 raw key bytes. A file made only of hex digits and whitespace is
    always read as hex, so a short hex key is rejected rather than taken as
    raw bytes.
    """
    data = Path(path).read_bytes()
    if _is_hex_text(data):
        return parse_hex_key(data.decode("ascii"))
    if len(data) != KEY_SIZE:
        raise InvalidKeyError(len(data))
    return data


@dataclass
class Config:
    """Settings for a Scrambler."""

    key: bytes
    backend: str = DEFAULT_BACKEND

    def __post_init__(self):
        self.key = bytes(self.key)
        if len(self.key) != KEY_SIZE:
            raise InvalidKeyError(len(self.key))
        # Fails early on an unknown backend name
        get_encrypter(self.backend)

    @property
    def encrypter_cls(self) -> type:
        """Encrypter class for the configured backend."""
        return get_encrypter(self.backend)

    def create_scrambler(self) -> Scrambler:
        return Scrambler(self.key, self.encrypter_cls)

    @classmethod
    def from_hex(cls, text: str, backend: str = DEFAULT_BACKEND) -> "Config":
        return cls(key=parse_hex_key(text), backend=backend)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """
        Build a Config from CRYPTOPAN_KEY and CRYPTOPAN_BACKEND.

        Raises:
            InvalidKeyError: CRYPTOPAN_KEY is unset or malformed
        """
        if environ is None:
            environ = os.environ
        text = environ.get(ENV_KEY)
        if not text:
            raise InvalidKeyError(0, reason=f"{ENV_KEY} is not set")
        backend = environ.get(ENV_BACKEND) or DEFAULT_BACKEND
        return cls.from_hex(text, backend=backend)

    def __repr__(self) -> str:
        # Never print the key
        return f"Config(backend={self.backend!r})"
