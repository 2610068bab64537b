"""
main.py
-------
Maintenance entry point for the catalog backend.

Commands:
    python main.py init-db          Create tables and indexes.
    python main.py sweep            Remove orphaned attachments once.
    python main.py sweep --loop     Keep sweeping every SWEEP_INTERVAL_SECONDS.

The HTTP layer imports services/ directly; it does not go through here.
"""

import argparse

from config import SWEEP_INTERVAL_SECONDS
from db.connection import init_pool, close_pool
from db.init_db import create_tables
from services.cleanup_service import CleanupService
from utils.logger import get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Portfolio catalog maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create the database schema")

    sweep = sub.add_parser("sweep", help="delete attachments whose parent is gone")
    sweep.add_argument("--loop", action="store_true", help="repeat forever")
    sweep.add_argument(
        "--interval",
        type=int,
        default=SWEEP_INTERVAL_SECONDS,
        help="seconds between sweeps with --loop",
    )
    return parser


def main(argv=None) -> None:
    """Parse arguments and run the requested command."""
    args = build_parser().parse_args(argv)

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()

    try:
        # ── 2. Run the command ────────────────────────────
        if args.command == "init-db":
            create_tables()
        elif args.command == "sweep":
            cleanup = CleanupService()
            if args.loop:
                cleanup.run_forever(args.interval)
            else:
                cleanup.sweep_orphaned_files()
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        # ── 3. Cleanup on shutdown ────────────────────────
        close_pool()


if __name__ == "__main__":
    main()
