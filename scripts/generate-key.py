#!/usr/bin/env python3
"""Generate a master key for the Frugal admin API."""

import secrets


def main() -> None:
    raw_key = f"frg_admin_{secrets.token_urlsafe(32)}"

    print()
    print("  Frugal admin key:")
    print(f"    {raw_key}")
    print()
    print("  Set it in your environment:")
    print(f'    export FRUGAL_MASTER_API_KEY="{raw_key}"')
    print()
    print("  Or in frugal.yaml:")
    print("    auth:")
    print(f'      master_api_key: "{raw_key}"')
    print()


if __name__ == "__main__":
    main()
