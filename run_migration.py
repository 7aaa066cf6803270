"""
run_migration
-------------
One-shot CLI that consolidates the legacy HR collections into the canonical
users / leaveRequests / settings collections and prints a summary.

Usage:
    python run_migration.py [--dry-run] [--credentials key.json] [--project ID]

Take a backup first (run_backup.py). A failed run may leave some batches
committed; restore from the backup and run again from the start.
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from time import perf_counter

from consolidate import rules
from consolidate.errors import BatchCommitError, StepError
from consolidate.merge_engine import MergeContext
from consolidate.orchestrator import MigrationOrchestrator
from consolidate.steps import MigrationSteps


def _checkpoint(label: str, t0: float | None = None) -> float:
    """
    Print a progress checkpoint and optionally the elapsed time since t0.
    Returns a fresh timestamp so you can chain checkpoints.
    """
    now = perf_counter()
    if t0 is None:
        print(f"[chk] {label}")
    else:
        print(f"[chk] {label}  (Δ {now - t0:.2f}s)")
    return now


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Consolidate legacy HR collections")
    ap.add_argument("--dry-run", action="store_true", help="merge everything but write nothing")
    ap.add_argument("--credentials", default=None, help="service account key file")
    ap.add_argument("--project", default=None, help="Firebase project id")
    ap.add_argument("--users-batch-size", type=int, default=rules.USERS_BATCH_SIZE)
    ap.add_argument("--requests-batch-size", type=int, default=rules.LEAVE_REQUESTS_BATCH_SIZE)
    ap.add_argument("--skip-verify", action="store_true",
                    help="do not count the collections that are kept as-is")
    return ap


def run(store, args, now: datetime | None = None) -> int:
    """Run every step against `store`; returns the process exit status."""
    print("=" * 60)
    print("🚀 STARTING MIGRATION TO CONSOLIDATED COLLECTIONS")
    if args.dry_run:
        print("   (dry run: nothing will be written)")
    print("=" * 60)

    ctx = MergeContext(now=now or datetime.now(timezone.utc))
    steps = MigrationSteps(store, ctx, dry_run=args.dry_run,
                           users_batch_size=args.users_batch_size,
                           requests_batch_size=args.requests_batch_size)
    orchestrator = MigrationOrchestrator(steps.default_steps(verify=not args.skip_verify),
                                         read_only=MigrationSteps.READ_ONLY_STEPS)

    t0 = _checkpoint("migration steps: " + ", ".join(orchestrator.step_names))
    try:
        summary = orchestrator.run()
    except StepError as exc:
        _checkpoint(f"failed at step '{exc.step}'", t0)
        print(f"\n❌ MIGRATION FAILED at step '{exc.step}': {exc.cause}")
        if isinstance(exc.cause, BatchCommitError):
            print(f"   {exc.cause.committed} documents of '{exc.cause.collection}' were already committed")
        print("   Please restore from backup and re-run the whole migration")
        return 1
    _checkpoint("migration done", t0)

    print("\n" + "=" * 60)
    print("✅ MIGRATION COMPLETED SUCCESSFULLY!")
    print("=" * 60)
    for line in summary.lines():
        print(line)

    print("\n⚠️ IMPORTANT NEXT STEPS:")
    print("   1. Update security rules for the consolidated collections")
    print("   2. Test all application features")
    print("   3. Remove the legacy collections only after verification")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    from store_adaptor import FirestoreStore
    store = FirestoreStore.from_env(args.credentials, args.project)
    return run(store, args)


if __name__ == "__main__":
    sys.exit(main())
