#!/usr/bin/env python3
"""
Reconciliation sweep for report fulfillment.

Re-runs fulfillment for paid checkout sessions whose report was never
delivered: failed jobs, and unfinished jobs older than --stale-after seconds.
Runs on a schedule against the DynamoDB job store and exits 2 when any
other job store is configured.

Usage:
    python -m vinreport.scripts.reconcile
    python -m vinreport.scripts.reconcile --max-attempts 5 --stale-after 900
"""

import argparse
import asyncio
import sys

from vinreport.api.dependencies import get_fulfillment_service
from vinreport.config import get_settings
from vinreport.models.enums import JobStoreKind
from vinreport.services.fulfillment import ReconcileSummary
from vinreport.utils.logging import configure_logging


def run(max_attempts: int, stale_after: float) -> ReconcileSummary:
    service = get_fulfillment_service()
    return asyncio.run(
        service.reconcile(max_attempts=max_attempts, stale_after_seconds=stale_after)
    )


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Retry undelivered VIN report orders")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=settings.reconcile_max_attempts,
        help=f"Leave jobs with this many attempts alone (default: {settings.reconcile_max_attempts})",
    )
    parser.add_argument(
        "--stale-after",
        type=float,
        default=600.0,
        help="Seconds before an unfinished job counts as abandoned (default: 600)",
    )
    args = parser.parse_args(argv)

    if settings.job_store != JobStoreKind.DYNAMODB:
        # A fresh process starts with an empty in-memory store
        print(
            f"Nothing to reconcile with JOB_STORE={settings.job_store.value}; set JOB_STORE=dynamodb",
            file=sys.stderr,
        )
        return 2

    configure_logging(settings.log_level)
    summary = run(args.max_attempts, args.stale_after)

    print(f"Succeeded: {len(summary.succeeded)}")
    print(f"Failed:    {len(summary.failed)}")
    print(f"Skipped:   {len(summary.skipped)}")
    for session_id in summary.failed:
        print(f"  still failing: {session_id}")

    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
