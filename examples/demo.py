#!/usr/bin/env python3
"""
Demo of Crypto-PAn prefix-preserving IP anonymization.

This demonstrates:
1. Building a scrambler from a 32-byte key
2. Checking the published reference vectors
3. Prefix preservation on a small set of addresses
"""

import ipaddress
import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptopan import Scrambler, CryptographyAESEncrypter

# Key from the original Crypto-PAn source distribution
KEY = bytes([
    21, 34, 23, 141, 51, 164, 207, 128, 19, 10, 91, 22, 73, 144, 125, 16,
    216, 152, 143, 131, 121, 121, 101, 39, 98, 87, 76, 45, 42, 132, 34, 2,
])

VECTORS = [
    ("128.11.68.132", "135.242.180.132"),
    ("192.41.57.43", "252.222.221.184"),
    ("::1", "78ff:f001:9fc0:20df:8380:b1f1:704:ed"),
    ("2001:db8::1", "4401:2bc:603f:d91d:27f:ff8e:e6f1:dc1e"),
]


def shared_prefix(a, b) -> int:
    """Number of leading bits two same-version addresses share."""
    return a.max_prefixlen - (int(a) ^ int(b)).bit_length()


def main():
    print("=" * 60)
    print("Crypto-PAn Prefix-Preserving Anonymization Demo")
    print("=" * 60)

    print("\n[1] Building scrambler...")
    start = time.time()
    scrambler = Scrambler(KEY)
    print(f"    {scrambler} ready in {(time.time() - start) * 1000:.2f}ms")

    print("\n[2] Reference vectors")
    for addr, expected in VECTORS:
        result = scrambler.anonymize(addr)
        print(f"    {addr:>15} -> {result:<40} correct={result == expected}")

    print("\n[3] Prefix preservation")
    addresses = [
        ipaddress.ip_address(a)
        for a in ["10.1.2.3", "10.1.2.200", "10.1.77.5", "10.200.0.1", "192.168.0.1"]
    ]
    first = addresses[0]
    anon_first = scrambler.scramble_ip(first)
    for addr in addresses:
        anon = scrambler.scramble_ip(addr)
        print(f"    {str(addr):>15} -> {str(anon):<15} "
              f"shared prefix with {first}: {shared_prefix(first, addr):2d} bits "
              f"(anonymized: {shared_prefix(anon_first, anon):2d} bits)")

    print("\n[4] Backends")
    alt = Scrambler(KEY, CryptographyAESEncrypter)
    agree = all(alt.anonymize(a) == scrambler.anonymize(a) for a, _ in VECTORS)
    print(f"    pycryptodome and cryptography agree: {agree}")

    print("\n[5] Throughput")
    count = 200
    start = time.time()
    for i in range(count):
        scrambler.scramble_ipv6(ipaddress.IPv6Address(i))
    elapsed = time.time() - start
    print(f"    {count} IPv6 addresses in {elapsed:.3f}s "
          f"({elapsed / count * 1000:.2f}ms each)")

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
