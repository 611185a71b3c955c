"""Request a Farcaster account association for the app domain from Neynar.

Usage: NEYNAR_APP_KEY=... python scripts/gen_assoc.py [--domain warpcat.xyz]
Paste the printed header/payload/signature into FARCASTER_HEADER,
FARCASTER_PAYLOAD and FARCASTER_SIGNATURE.
"""
import argparse
import json
import sys

import httpx

from app.core.settings import settings

NEYNAR_ASSOCIATION_URL = "https://api.neynar.com/v2/app/create-account-association"


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--domain", default=settings.app_domain)
    args = parser.parse_args()

    if not settings.neynar_app_key:
        print("NEYNAR_APP_KEY is not set", file=sys.stderr)
        return 1

    resp = httpx.post(
        NEYNAR_ASSOCIATION_URL,
        headers={"content-type": "application/json", "api_key": settings.neynar_app_key},
        json={"domain": args.domain},
        timeout=30.0,
    )
    if resp.is_error:
        print(f"Failed: {resp.status_code} {resp.text}", file=sys.stderr)
        return 1

    print("\n=== accountAssociation ===")
    print(json.dumps(resp.json(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
