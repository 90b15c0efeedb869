"""
Provision the default official account (non-production only).

Usage:
  - Dry run (default): python scripts/provision_official.py
  - Apply:             python scripts/provision_official.py --apply
  - Also replace a differing password on an existing account:
                       python scripts/provision_official.py --apply --reset-password

Reads DEFAULT_OFFICIAL_EMAIL / DEFAULT_OFFICIAL_PASSWORD (and the optional
name/phone variables) from the environment or .env. Refuses to run with
ENVIRONMENT=production.
"""

import argparse
import sys

from app.config.firebase import initialize_firestore
from app.core.logging_config import configure_logging
from app.services.provisioning import ProvisioningRefused, provision_default_official


def main(argv=None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write changes instead of dry-run")
    parser.add_argument("--reset-password", action="store_true", help="Overwrite the password of an existing account")
    parser.add_argument("--email", help="Override DEFAULT_OFFICIAL_EMAIL")
    args = parser.parse_args(argv)

    configure_logging()
    initialize_firestore()

    try:
        result = provision_default_official(apply=args.apply, reset_password=args.reset_password, email=args.email)
    except ProvisioningRefused as e:
        print(f"Refused: {e}")
        return 1

    print(f"{result['action']}: {result['email']} {result['changes'] or ''}".rstrip())
    if not args.apply and result["action"] != "noop":
        print("Dry run complete. Re-run with --apply to write to DB.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
