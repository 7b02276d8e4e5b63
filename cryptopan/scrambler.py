"""
Prefix-preserving IP address scrambling (Crypto-PAn).

Reference: J. Xu, J. Fan, M. Ammar, S. Moon, "Prefix-Preserving IP Address
Anonymization: Measurement-based Security Evaluation and a New
Cryptography-based Scheme" (ICNP 2002).

Construction, for a 32-byte key K:
    E = block cipher keyed with K[0:16]
    pad = E(K[16:32])

    scramble(x, n):                  // x is a 128-bit buffer, MSB first
        for i = 0 to n - 1:
            padded = first i bits of x || last 128 - i bits of pad
            flip[i] = MSB of E(padded)
        return x XOR flip            // flip is zero past bit n - 1

Two buffers that agree on their first k bits produce the same padded block
for every i < k, hence the same flip bits, hence outputs that agree on their
first k bits.

IPv4 addresses occupy the most significant 32 bits of the buffer. This is the
embedding used by the reference implementation and its published test vectors.
"""

import ipaddress
import logging

from .encrypter import BLOCK_SIZE, CIPHER_KEY_SIZE, AESEncrypter, Encrypter
from .errors import KEY_SIZE, AddressParseError, InvalidKeyError

logger = logging.getLogger(__name__)

MAX_BITS = BLOCK_SIZE * 8
IPV4_BITS = 32
IPV6_BITS = 128

_FULL = (1 << MAX_BITS) - 1

# _HIGH_MASKS[i] has the top i bits set.
_HIGH_MASKS = tuple(_FULL ^ (_FULL >> i) for i in range(MAX_BITS + 1))


class Scrambler:
    """
    Crypto-PAn scrambler for one key.

    Construct once per key and reuse for any number of addresses. Scrambling
    never mutates the scrambler, so one instance can be shared across threads
    as long as its encrypter is thread-safe (both bundled backends are).
    """

    def __init__(self, key: bytes, encrypter_cls: type = AESEncrypter):
        """
        Initialize the scrambler.

        Args:
            key: 32-byte secret. The first half keys the block cipher, the
                 second half is encrypted once to form the padding block.
            encrypter_cls: Encrypter implementation to use (default: AES-128
                 via pycryptodome)

        Raises:
            InvalidKeyError: key is not exactly 32 bytes
        """
        key = bytes(key)
        if len(key) != KEY_SIZE:
            raise InvalidKeyError(len(key))

        encrypter = encrypter_cls.from_key(key[:CIPHER_KEY_SIZE])
        self._setup(encrypter, key[CIPHER_KEY_SIZE:])

    @classmethod
    def with_encrypter(cls, encrypter: Encrypter, padding_seed: bytes) -> "Scrambler":
        """
        Build a scrambler around an already-initialized encrypter.

        Args:
            encrypter: Keyed encrypter
            padding_seed: 16-byte block encrypted once to form the padding

        Returns:
            Configured Scrambler
        """
        padding_seed = bytes(padding_seed)
        if len(padding_seed) != BLOCK_SIZE:
            raise ValueError(f"padding_seed must be {BLOCK_SIZE} bytes, got {len(padding_seed)}")
        scrambler = cls.__new__(cls)
        scrambler._setup(encrypter, padding_seed)
        return scrambler

    def _setup(self, encrypter: Encrypter, padding_seed: bytes) -> None:
        self._encrypter = encrypter
        padding = int.from_bytes(encrypter.encrypt(padding_seed), "big")
        # Padding bits that fill position i onwards, one entry per i.
        self._padding_fill = tuple(padding & ~mask for mask in _HIGH_MASKS[:MAX_BITS])
        logger.debug("Scrambler initialized with %s", type(encrypter).__name__)

    def __repr__(self) -> str:
        return f"Scrambler(encrypter={type(self._encrypter).__name__})"

    def scramble(self, buffer: bytes, n_bits: int) -> bytes:
        """
        Scramble the first n_bits of a 128-bit buffer.

        Args:
            buffer: 16-byte address buffer, most significant bit first
            n_bits: Number of leading bits to transform, in [0, 128]

        Returns:
            16-byte scrambled buffer. Bits from position n_bits onwards are
            copied from the input unchanged.

        Raises:
            ValueError: buffer is not 16 bytes or n_bits is out of range
        """
        if len(buffer) != BLOCK_SIZE:
            raise ValueError(f"Buffer must be {BLOCK_SIZE} bytes, got {len(buffer)}")
        if not 0 <= n_bits <= MAX_BITS:
            raise ValueError(f"n_bits must be in [0, {MAX_BITS}], got {n_bits}")

        value = int.from_bytes(buffer, "big")
        encrypt = self._encrypter.encrypt
        fill = self._padding_fill

        flips = 0
        for i in range(n_bits):
            padded = (value & _HIGH_MASKS[i]) | fill[i]
            flip_bit = encrypt(padded.to_bytes(BLOCK_SIZE, "big"))[0] >> 7
            flips |= flip_bit << (MAX_BITS - 1 - i)

        return (value ^ flips).to_bytes(BLOCK_SIZE, "big")

    def _scramble_ipv4_packed(self, packed: bytes) -> bytes:
        if len(packed) != 4:
            raise ValueError(f"IPv4 address must be 4 bytes, got {len(packed)}")
        buffer = packed + bytes(BLOCK_SIZE - 4)
        return self.scramble(buffer, IPV4_BITS)[:4]

    def _scramble_ipv6_packed(self, packed: bytes) -> bytes:
        if len(packed) != BLOCK_SIZE:
            raise ValueError(f"IPv6 address must be {BLOCK_SIZE} bytes, got {len(packed)}")
        return self.scramble(packed, IPV6_BITS)

    def scramble_ipv4(self, addr):
        """
        Scramble an IPv4 address.

        Args:
            addr: IPv4Address or its 4-byte packed form

        Returns:
            Scrambled address, of the same kind as addr
        """
        if isinstance(addr, ipaddress.IPv4Address):
            return ipaddress.IPv4Address(self._scramble_ipv4_packed(addr.packed))
        if isinstance(addr, (bytes, bytearray)):
            return self._scramble_ipv4_packed(bytes(addr))
        raise TypeError(f"Expected IPv4Address or bytes, got {type(addr).__name__}")

    def scramble_ipv6(self, addr):
        """
        Scramble an IPv6 address.

        Args:
            addr: IPv6Address or its 16-byte packed form. A scope zone on
                 an IPv6Address is not carried over to the result.

        Returns:
            Scrambled address, of the same kind as addr
        """
        if isinstance(addr, ipaddress.IPv6Address):
            return ipaddress.IPv6Address(self._scramble_ipv6_packed(addr.packed))
        if isinstance(addr, (bytes, bytearray)):
            return self._scramble_ipv6_packed(bytes(addr))
        raise TypeError(f"Expected IPv6Address or bytes, got {type(addr).__name__}")

    def scramble_ip(self, addr):
        """Scramble an IPv4Address or IPv6Address, keeping its version."""
        if isinstance(addr, ipaddress.IPv4Address):
            return self.scramble_ipv4(addr)
        if isinstance(addr, ipaddress.IPv6Address):
            return self.scramble_ipv6(addr)
        raise TypeError(f"Expected an IP address, got {type(addr).__name__}")

    def anonymize(self, address: str) -> str:
        """
        Anonymize an address given in text form.

        Args:
            address: IPv4 dotted quad or IPv6 text. Scoped IPv6 addresses
                 ("fe80::1%eth0") are rejected: the zone is not part of the
                 128-bit address and would be lost.

        Returns:
            Anonymized address as text (IPv6 in compressed form)

        Raises:
            AddressParseError: address is not a valid IP address
        """
        try:
            ip = ipaddress.ip_address(address)
        except ValueError as exc:
            raise AddressParseError(address) from exc
        if getattr(ip, "scope_id", None):
            raise AddressParseError(address, "scoped IPv6 addresses are not supported")
        return str(self.scramble_ip(ip))
