from __future__ import annotations

import argparse
import logging
import sys

from bootstrap import (
    MIGRATION_MARKER_KEY,
    clear_bootstrap_marker,
    has_bootstrap_marker,
    run_bootstrap_migrations,
    set_bootstrap_marker,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or upgrade the Alumni Connect schema.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Upgrade even if the schema marker already exists.",
    )
    parser.add_argument(
        "--clear-marker",
        action="store_true",
        help=f"Remove marker key `{MIGRATION_MARKER_KEY}` before upgrading.",
    )
    parser.add_argument(
        "--clear-only",
        action="store_true",
        help="Remove the marker and exit.",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Report whether the marker exists and exit.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.status:
        state = "present" if has_bootstrap_marker() else "absent"
        logger.info("Marker `%s` is %s.", MIGRATION_MARKER_KEY, state)
        return 0

    if args.clear_marker or args.clear_only:
        if clear_bootstrap_marker():
            logger.info("Cleared marker `%s`.", MIGRATION_MARKER_KEY)
        else:
            logger.info("Marker `%s` was already absent.", MIGRATION_MARKER_KEY)
        if args.clear_only:
            return 0

    if has_bootstrap_marker() and not args.force:
        logger.info("Marker `%s` exists; schema already upgraded. Use --force to rerun.", MIGRATION_MARKER_KEY)
        return 0

    logger.info("Upgrading schema...")
    run_bootstrap_migrations()
    set_bootstrap_marker()
    logger.info("Schema upgrade finished; marker `%s` updated.", MIGRATION_MARKER_KEY)
    return 0


if __name__ == "__main__":
    sys.exit(main())
