"""
128-bit block encrypters for the Crypto-PAn scrambler.

AES-128 is what every Crypto-PAn implementation uses, but any secure 128-bit
block cipher can serve as the backend. The Scrambler only relies on the
Encrypter protocol below.

An encrypter must be:
- Deterministic: same key and block always give the same output
- Secure: indistinguishable from a random permutation without the key
- Fast: an IPv6 address costs 128 encryptions

Backends:
- AESEncrypter: pycryptodome, one cipher object per thread
- CryptographyAESEncrypter: cryptography, one encryptor guarded by a lock
"""

import threading
from typing import Protocol

from Crypto.Cipher import AES
from cryptography.exceptions import AlreadyFinalized
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import EncryptionError, InvalidKeyError

BLOCK_SIZE = 16
CIPHER_KEY_SIZE = 16


class Encrypter(Protocol):
    """
    Encrypts one 128-bit block under a fixed key.

    Cipher backends often keep a mutable context. Implementations must hide
    it so that encrypt() behaves as a pure function and is safe to call from
    several threads at once.
    """

    @classmethod
    def from_key(cls, key: bytes) -> "Encrypter":
        """
        Initialize an encrypter from a 128-bit key.

        Args:
            key: 16-byte cipher key

        Raises:
            InvalidKeyError: key has the wrong length or is rejected
            EncryptionError: the cipher context could not be created
        """
        ...

    def encrypt(self, block: bytes) -> bytes:
        """
        Encrypt a single 16-byte block.

        Args:
            block: 16-byte plaintext

        Returns:
            16-byte ciphertext

        Raises:
            TypeError: block is not bytes-like
            ValueError: block is not 16 bytes
            EncryptionError: the backend failed to process the block
        """
        ...


def _check_key(key: bytes) -> bytes:
    key = bytes(key)
    if len(key) != CIPHER_KEY_SIZE:
        raise InvalidKeyError(len(key), CIPHER_KEY_SIZE)
    return key


def _check_block(block: bytes) -> None:
    if not isinstance(block, (bytes, bytearray, memoryview)):
        raise TypeError(f"Block must be bytes-like, got {type(block).__name__}")
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"Block must be {BLOCK_SIZE} bytes, got {len(block)}")


class AESEncrypter:
    """
    AES-128-ECB encrypter backed by pycryptodome.

    Each thread gets its own cipher object, so no context is ever shared
    between concurrent calls.
    """

    name = "pycryptodome"

    def __init__(self, key: bytes):
        self._key = _check_key(key)
        self._local = threading.local()
        # Build one context up front so a bad key fails here, not on first use.
        self._local.cipher = self._new_cipher()

    @classmethod
    def from_key(cls, key: bytes) -> "AESEncrypter":
        return cls(key)

    def _new_cipher(self):
        try:
            return AES.new(self._key, AES.MODE_ECB)
        except ValueError as exc:
            raise InvalidKeyError(len(self._key), CIPHER_KEY_SIZE, str(exc)) from exc

    def _cipher(self):
        cipher = getattr(self._local, "cipher", None)
        if cipher is None:
            cipher = self._local.cipher = self._new_cipher()
        return cipher

    def encrypt(self, block: bytes) -> bytes:
        _check_block(block)
        try:
            return self._cipher().encrypt(block)
        except ValueError as exc:
            raise EncryptionError(f"AES encryption failed: {exc}") from exc


class CryptographyAESEncrypter:
    """
    AES-128-ECB encrypter backed by the cryptography package.

    A single streaming encryptor is created per key. ECB keeps no chaining
    state, but the context object itself is not thread-safe, so update() is
    serialized with a lock.
    """

    name = "cryptography"

    def __init__(self, key: bytes):
        key = _check_key(key)
        try:
            algorithm = algorithms.AES(key)
        except ValueError as exc:
            raise InvalidKeyError(len(key), CIPHER_KEY_SIZE, str(exc)) from exc
        try:
            self._encryptor = Cipher(algorithm, modes.ECB()).encryptor()
        except ValueError as exc:
            raise EncryptionError(f"Cipher creation failed: {exc}") from exc
        self._lock = threading.Lock()

    @classmethod
    def from_key(cls, key: bytes) -> "CryptographyAESEncrypter":
        return cls(key)

    def encrypt(self, block: bytes) -> bytes:
        _check_block(block)
        try:
            with self._lock:
                output = self._encryptor.update(block)
        except (AlreadyFinalized, ValueError) as exc:
            raise EncryptionError(f"AES encryption failed: {exc}") from exc
        if len(output) != BLOCK_SIZE:
            raise EncryptionError(f"Cipher returned {len(output)} bytes, expected {BLOCK_SIZE}")
        return output


ENCRYPTERS: dict[str, type] = {
    AESEncrypter.name: AESEncrypter,
    CryptographyAESEncrypter.name: CryptographyAESEncrypter,
}

DEFAULT_BACKEND = AESEncrypter.name


def get_encrypter(name: str) -> type:
    """
    Look up an encrypter class by backend name.

    Args:
        name: Backend name ("pycryptodome" or "cryptography")

    Returns:
        The encrypter class
    """
    try:
        return ENCRYPTERS[name]
    except KeyError:
        known = ", ".join(sorted(ENCRYPTERS))
        raise ValueError(f"Unknown encrypter backend {name!r} (known: {known})") from None
