"""
Delete the N most recent snapshots (by timestamp, across all URLs).
Useful after a bad run polluted the comparison baseline.

Usage: python remove_last_entries.py <number> [--store sqlite|mysql]
"""

import argparse
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), "seo-monitor"))

from crawler import config
from crawler.logger import logger
from monitor.cli import build_store


def main(argv=None):
    parser = argparse.ArgumentParser(description="Remove the most recent snapshots")
    parser.add_argument("count", type=int)
    parser.add_argument("--store", choices=["sqlite", "mysql"], default=config.STORE_BACKEND)
    args = parser.parse_args(argv)

    if args.count <= 0:
        parser.error("Please provide a valid number of entries to remove.")

    store = build_store(args.store)
    try:
        deleted = store.remove_latest(args.count)
    finally:
        store.close()

    if deleted == 0:
        logger.info("No entries found to delete.")
    else:
        logger.info(f"Successfully deleted {deleted} entries.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
