#!/usr/bin/env python
# backend/app/commands/maintenance.py
"""
Periodic maintenance commands for HubContent.

Sweeps rows whose time has run out. Safe to run from cron at any frequency:
every sweep uses the same idempotent finalization as the request path.

Usage:
    python -m app.commands.maintenance sessions        # End overdue live sessions
    python -m app.commands.maintenance subscriptions   # Expire lapsed subscriptions
    python -m app.commands.maintenance all            # Both
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from app.database import SessionLocal
from app.services.streaming_session_service import StreamingSessionService
from app.services.subscription_service import SubscriptionService

logger = logging.getLogger(__name__)


def run_sweeps(targets: List[str]) -> Dict[str, int]:
    """Run the requested sweeps in one database session; returns rows changed per sweep."""
    results: Dict[str, int] = {}
    db = SessionLocal()
    try:
        if "sessions" in targets:
            results["sessions"] = StreamingSessionService(db).expire_overdue_sessions()
        if "subscriptions" in targets:
            results["subscriptions"] = SubscriptionService(db).expire_overdue()
    finally:
        db.close()
    return results


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="HubContent maintenance sweeps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("target", choices=["sessions", "subscriptions", "all"])
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    targets = ["sessions", "subscriptions"] if args.target == "all" else [args.target]
    try:
        results = run_sweeps(targets)
    except Exception:
        logger.exception("Maintenance sweep failed")
        sys.exit(1)
    for name, count in results.items():
        print(f"{name}: {count} updated")


if __name__ == "__main__":
    main()
