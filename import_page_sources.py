"""
Import saved HTML page sources into the snapshot store.

Usage: python import_page_sources.py [DIR] [--store sqlite|mysql]
"""

import argparse
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), "seo-monitor"))

from crawler import config
from crawler.logger import logger
from monitor.cli import build_store
from snapshots.importer import import_page_sources


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import saved page sources")
    parser.add_argument("directory", nargs="?", default="page_sources")
    parser.add_argument("--store", choices=["sqlite", "mysql"], default=config.STORE_BACKEND)
    args = parser.parse_args(argv)

    store = build_store(args.store)
    try:
        inserted = import_page_sources(args.directory, store)
    except Exception:
        logger.exception("Error loading past files")
        return 1
    finally:
        store.close()

    logger.info(f"Imported {inserted} page source(s) from {args.directory}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
