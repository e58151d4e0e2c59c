"""Register a user from the command line.

Usage:
  python scripts/create_user.py --username alice_w --email alice@example.com --password '...'

Goes through the same validation and hashing as the HTTP register endpoint.
"""

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from credential_auth.auth import build_auth_service
from credential_auth.config import load_config
from credential_auth.db import init_db


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--username", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--first-name", default=None)
    ap.add_argument("--last-name", default=None)
    ap.add_argument("--job-title", default=None)
    args = ap.parse_args()

    cfg = load_config()
    init_db(cfg.DB_DSN, timeout_seconds=cfg.DB_TIMEOUT_SECONDS)

    svc = build_auth_service(cfg)
    result = svc.register(
        args.username,
        args.email,
        args.password,
        first_name=args.first_name,
        last_name=args.last_name,
        job_title=args.job_title,
    )

    print(f"Result: {result.status.value}")
    body = result.body()
    if body:
        print(json.dumps(body, indent=2))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
