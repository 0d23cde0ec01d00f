#!/usr/bin/env python3
"""Add a key to the keybase.

Usage:
    python scripts/add_key.py validator             # generate a new key
    python scripts/add_key.py validator --import    # prompts for private key hex

The passphrase is always read from the terminal.
"""

import argparse
import sys
from getpass import getpass

from txsign.config import get_settings
from txsign.signing.keybase import Keybase


def main() -> int:
    parser = argparse.ArgumentParser(description="Add a key to the keybase")
    parser.add_argument("name", help="Key name")
    parser.add_argument(
        "--import",
        dest="import_key",
        action="store_true",
        help="Import an existing private key instead of generating one",
    )
    args = parser.parse_args()

    settings = get_settings()
    keybase = Keybase(
        key_dir=settings.key_dir,
        kdf_iterations=settings.kdf_iterations,
        bech32_prefix=settings.bech32_prefix,
    )

    private_key = None
    if args.import_key:
        private_key_hex = getpass("Private key (hex): ").strip()
        try:
            private_key = bytes.fromhex(private_key_hex.replace("0x", ""))
        except ValueError:
            print("Error: private key must be hex")
            return 1

    passphrase = getpass("Passphrase: ")
    if passphrase != getpass("Repeat passphrase: "):
        print("Error: passphrases do not match")
        return 1

    try:
        info = keybase.add_key(args.name, passphrase, private_key)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Name:    {info.name}")
    print(f"Address: {info.address}")
    print(f"PubKey:  {info.public_key.hex()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
