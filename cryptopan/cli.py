"""
Command line interface.

Usage:
    cryptopan --key HEX 192.0.2.1 2001:db8::1     # anonymize arguments
    cryptopan --key-file key.bin < addresses.txt  # anonymize stdin, one per line
    CRYPTOPAN_KEY=... cryptopan 10.0.0.1          # key from the environment
"""

import argparse
import logging
import sys

from .config import Config, load_key_file
from .encrypter import DEFAULT_BACKEND, ENCRYPTERS
from .errors import AddressParseError, CryptoPAnError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_ADDRESS = 1
EXIT_BAD_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cryptopan",
        description="Prefix-preserving IP address anonymization (Crypto-PAn).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    key_group = parser.add_mutually_exclusive_group()
    key_group.add_argument("--key", help="32-byte key as 64 hex digits")
    key_group.add_argument("--key-file", help="File holding the key (32 raw bytes or 64 hex digits)")
    parser.add_argument(
        "--backend",
        choices=sorted(ENCRYPTERS),
        default=None,
        help=f"Block cipher backend (default: $CRYPTOPAN_BACKEND or {DEFAULT_BACKEND})",
    )
    parser.add_argument("--strict", action="store_true", help="Stop at the first invalid address")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    parser.add_argument("addresses", nargs="*", help="Addresses to anonymize (default: read stdin)")
    return parser


def load_config(args: argparse.Namespace) -> Config:
    """Resolve the key: --key, then --key-file, then the environment."""
    if args.key is not None:
        config = Config.from_hex(args.key)
    elif args.key_file is not None:
        config = Config(key=load_key_file(args.key_file))
    else:
        config = Config.from_env()
    if args.backend is not None:
        config = Config(key=config.key, backend=args.backend)
    return config


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        scrambler = load_config(args).create_scrambler()
    except (CryptoPAnError, OSError, ValueError) as exc:
        print(f"cryptopan: {exc}", file=sys.stderr)
        return EXIT_BAD_CONFIG

    if args.addresses:
        lines = args.addresses
    else:
        lines = sys.stdin

    status = EXIT_OK
    count = 0
    for line in lines:
        address = line.strip()
        if not address:
            continue
        try:
            print(scrambler.anonymize(address))
        except AddressParseError as exc:
            if args.strict:
                print(f"cryptopan: {exc}", file=sys.stderr)
                return EXIT_BAD_ADDRESS
            logger.warning("Skipping %s", exc)
            status = EXIT_BAD_ADDRESS
            continue
        count += 1

    logger.info("Anonymized %d addresses", count)
    return status


if __name__ == "__main__":
    sys.exit(main())
