#!/usr/bin/env python3
"""
Queue the welcome e-mail for a user.

Usage:
  python scripts/send_welcome_email.py ann@example.com "Ann Smith"
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from blog_api.services.notifications import dispatch_welcome_email  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Send a welcome email to a user")
    ap.add_argument("email", help="Recipient e-mail address")
    ap.add_argument("name", help="Recipient display name")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    email = args.email.strip()
    if not email:
        raise SystemExit("E-mail is required")

    if not dispatch_welcome_email(email, args.name.strip()):
        print(f"Failed to queue welcome email for: {email}", file=sys.stderr)
        return 1
    print(f"Welcome email queued for: {email}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
