"""
cryptopan: prefix-preserving IP address anonymization

A Python implementation of the Crypto-PAn scheme from:
"Prefix-Preserving IP Address Anonymization: Measurement-based Security
Evaluation and a New Cryptography-based Scheme"
by Jun Xu, Jinliang Fan, Mostafa Ammar, and Sue B. Moon (ICNP 2002)

Addresses sharing an N-bit prefix are mapped to addresses sharing an N-bit
prefix, so subnet structure survives anonymization.
"""

from .errors import CryptoPAnError, InvalidKeyError, EncryptionError, AddressParseError
from .encrypter import Encrypter, AESEncrypter, CryptographyAESEncrypter, get_encrypter
from .scrambler import Scrambler
from .config import Config

__version__ = "0.1.0"
__all__ = [
    "Scrambler",
    "Config",
    "Encrypter",
    "AESEncrypter",
    "CryptographyAESEncrypter",
    "get_encrypter",
    "CryptoPAnError",
    "InvalidKeyError",
    "EncryptionError",
    "AddressParseError",
]
