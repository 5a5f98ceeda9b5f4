#!/usr/bin/env python3
"""
Create the schema (optionally from scratch) and seed the default accounts and
listings into the database named by DATABASE_URL.

Usage:
    python scripts/seed_data.py [--reset]
"""
import argparse
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from marketplace.db import SessionLocal, init_db  # noqa: E402
from marketplace.db.seed import seed_dev_data  # noqa: E402


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args(argv)

    init_db(reset=args.reset)
    db = SessionLocal()
    try:
        seed_dev_data(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
