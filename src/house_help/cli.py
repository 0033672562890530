"""House help tracker command line interface.

Works on the local ledger file (``LEDGER_PATH``) and can sync it with the
remote API (``SYNC_URL``).

Usage:
    python -m house_help.cli worker add "Asha" --shift-label Morning
    python -m house_help.cli mark WORKER_ID 2024-06-03 half
    python -m house_help.cli salary WORKER_ID 2024-06 10000 4
    python -m house_help.cli summary WORKER_ID --month 2024-06
    python -m house_help.cli sync
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Callable

from house_help.calculators.salary import money
from house_help.config import get_settings
from house_help.ledger.backends import JsonFileBackend
from house_help.ledger.dates import WEEKDAY_SHORT, to_iso_date, weekday_index_mon0
from house_help.ledger.locks import MonthLockedError
from house_help.ledger.store import LedgerStore, LedgerValidationError
from house_help.services.autofill import AutoFiller
from house_help.services.remote import HttpLedgerRemote, LedgerRemote
from house_help.services.sync import SyncOutcome, SyncReconciler
from house_help.services.tracker import WorkerNotFoundError, WorkerTracker

logger = logging.getLogger(__name__)


def parse_date(s: str) -> str:
    """Validate a YYYY-MM-DD day key."""
    try:
        return to_iso_date(date.fromisoformat(s))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {s!r}, expected YYYY-MM-DD")


def default_remote() -> LedgerRemote | None:
    settings = get_settings()
    if not settings.sync_url:
        return None
    return HttpLedgerRemote(
        settings.sync_url,
        authorization=f"Bearer {settings.sync_token}" if settings.sync_token else None,
    )


class TrackerCli:
    """House help tracker command line interface."""

    def __init__(
        self,
        store: LedgerStore | None = None,
        *,
        today: Callable[[], date] = date.today,
        remote_factory: Callable[[], LedgerRemote | None] = default_remote,
    ) -> None:
        self.parser = self._build_parser()
        self._store = store
        self.today = today
        self.remote_factory = remote_factory

    @property
    def store(self) -> LedgerStore:
        if self._store is None:
            self._store = LedgerStore(JsonFileBackend(get_settings().ledger_path))
        return self._store

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m house_help.cli",
            description="Attendance and salary tracker for household workers",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # worker command
        worker = subparsers.add_parser("worker", help="Manage workers")
        worker_sub = worker.add_subparsers(dest="worker_command")
        add = worker_sub.add_parser("add", help="Add a worker")
        add.add_argument("name", help="Worker name")
        add.add_argument("--shift-label", help="Default shift label, e.g. Morning")
        worker_sub.add_parser("list", help="List workers")
        rename = worker_sub.add_parser("rename", help="Rename a worker")
        rename.add_argument("worker_id")
        rename.add_argument("name")
        rename.add_argument("--shift-label", help="New default shift label")
        remove = worker_sub.add_parser(
            "remove", help="Delete a worker and all their records"
        )
        remove.add_argument("worker_id")

        # mark command
        mark = subparsers.add_parser("mark", help="Set a day's attendance status")
        mark.add_argument("worker_id")
        mark.add_argument("date", type=parse_date, help="Day (YYYY-MM-DD)")
        mark.add_argument("status", help="worked, half, off or absent")
        mark.add_argument("--hours", type=float, help="Hours worked")
        mark.add_argument("--note", help="Free-text note")

        # note command
        note = subparsers.add_parser("note", help="Change hours or note of a marked day")
        note.add_argument("worker_id")
        note.add_argument("date", type=parse_date, help="Day (YYYY-MM-DD)")
        note.add_argument("--hours", type=float, help="Hours worked")
        note.add_argument("--note", help="Free-text note (empty string clears it)")

        # lock / unlock commands
        for name, help_text in (("lock", "Lock a paid month"), ("unlock", "Unlock a month")):
            cmd = subparsers.add_parser(name, help=help_text)
            cmd.add_argument("worker_id")
            cmd.add_argument("month", help="Month (YYYY-MM)")

        # salary command
        salary = subparsers.add_parser("salary", help="Set monthly salary settings")
        salary.add_argument("worker_id")
        salary.add_argument("month", help="Month (YYYY-MM)")
        salary.add_argument("monthly_salary", help="Monthly salary")
        salary.add_argument("paid_off_allowance", help="Paid OFF days per month")

        # deduct command
        deduct = subparsers.add_parser("deduct", help="Manage advances and deductions")
        deduct_sub = deduct.add_subparsers(dest="deduct_command")
        deduct_add = deduct_sub.add_parser("add", help="Record a deduction")
        deduct_add.add_argument("worker_id")
        deduct_add.add_argument("month", help="Month (YYYY-MM)")
        deduct_add.add_argument("amount")
        deduct_add.add_argument("--date", type=parse_date, help="Day given (default: today)")
        deduct_add.add_argument("--note", help="Free-text note")
        deduct_remove = deduct_sub.add_parser("remove", help="Delete a deduction")
        deduct_remove.add_argument("deduction_id")

        # summary command
        summary = subparsers.add_parser("summary", help="Show a month's totals and salary")
        summary.add_argument("worker_id")
        summary.add_argument("--month", help="Month (YYYY-MM, default: current month)")

        # autofill command
        autofill = subparsers.add_parser(
            "autofill", help="Mark unmarked past days of this month as worked"
        )
        autofill.add_argument("worker_id")

        # sync commands
        subparsers.add_parser("sync", help="Fetch the remote ledger, or upload if empty")
        subparsers.add_parser("push", help="Upload the local ledger")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[[argparse.Namespace], int]] = {
            "worker": self._cmd_worker,
            "mark": self._cmd_mark,
            "note": self._cmd_note,
            "lock": self._cmd_lock,
            "unlock": self._cmd_lock,
            "salary": self._cmd_salary,
            "deduct": self._cmd_deduct,
            "summary": self._cmd_summary,
            "autofill": self._cmd_autofill,
            "sync": self._cmd_sync,
            "push": self._cmd_push,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except (MonthLockedError, LedgerValidationError, WorkerNotFoundError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    @property
    def tracker(self) -> WorkerTracker:
        return WorkerTracker(self.store, today=self.today)

    def _cmd_worker(self, args: argparse.Namespace) -> int:
        """Manage workers."""
        tracker = self.tracker
        if args.worker_command == "add":
            worker = tracker.add_worker(args.name, args.shift_label)
            print(f"Added {worker.name}: {worker.id}")
        elif args.worker_command == "list":
            workers = tracker.list_workers()
            if not workers:
                print("No workers yet.")
            for worker in workers:
                label = f" ({worker.default_shift_label})" if worker.default_shift_label else ""
                print(f"{worker.id}  {worker.name}{label}")
        elif args.worker_command == "rename":
            kwargs = {}
            if args.shift_label is not None:
                kwargs["default_shift_label"] = args.shift_label
            worker = tracker.update_worker(args.worker_id, name=args.name, **kwargs)
            print(f"Renamed {worker.id} to {worker.name}")
        elif args.worker_command == "remove":
            tracker.remove_worker(args.worker_id)
            print(f"Removed {args.worker_id}")
        else:
            print("Usage: worker {add,list,rename,remove}", file=sys.stderr)
            return 1
        return 0

    def _cmd_mark(self, args: argparse.Namespace) -> int:
        """Set a day's attendance status."""
        kwargs = {}
        if args.hours is not None:
            kwargs["hours"] = args.hours
        if args.note is not None:
            kwargs["note"] = args.note
        entry = self.tracker.mark_day(args.worker_id, args.date, args.status, **kwargs)
        weekday = WEEKDAY_SHORT[weekday_index_mon0(date.fromisoformat(entry.date_iso))]
        print(f"{entry.date_iso} ({weekday}): {entry.status.value}")
        return 0

    def _cmd_note(self, args: argparse.Namespace) -> int:
        """Change hours or note of a marked day."""
        kwargs = {}
        if args.hours is not None:
            kwargs["hours"] = args.hours
        if args.note is not None:
            kwargs["note"] = args.note
        entry = self.tracker.update_entry_details(args.worker_id, args.date, **kwargs)
        print(f"{entry.date_iso}: hours={entry.hours} note={entry.note or ''}")
        return 0

    def _cmd_lock(self, args: argparse.Namespace) -> int:
        """Lock or unlock a month."""
        locked = args.command == "lock"
        self.tracker.set_month_locked(args.worker_id, args.month, locked)
        print(f"{args.month} {'locked' if locked else 'unlocked'} for {args.worker_id}")
        return 0

    def _cmd_salary(self, args: argparse.Namespace) -> int:
        """Set monthly salary settings."""
        config = self.tracker.save_salary(
            args.worker_id, args.month, args.monthly_salary, args.paid_off_allowance
        )
        print(
            f"{args.month}: salary {config.monthly_salary:,}, "
            f"paid OFF allowance {config.paid_off_allowance}"
        )
        return 0

    def _cmd_deduct(self, args: argparse.Namespace) -> int:
        """Manage advances and deductions."""
        if args.deduct_command == "add":
            deduction = self.tracker.add_deduction(
                args.worker_id, args.month, args.amount, date_iso=args.date, note=args.note
            )
            print(f"Recorded deduction {deduction.id}: {deduction.amount:,} on {deduction.date_iso}")
        elif args.deduct_command == "remove":
            self.tracker.remove_deduction(args.deduction_id)
            print(f"Removed deduction {args.deduction_id}")
        else:
            print("Usage: deduct {add,remove}", file=sys.stderr)
            return 1
        return 0

    def _cmd_summary(self, args: argparse.Namespace) -> int:
        """Show a month's totals and salary."""
        summary = self.tracker.month_summary(args.worker_id, args.month)
        totals = summary.totals
        salary = summary.salary

        print(f"{summary.worker.name}  {summary.month_key}{'  [locked]' if summary.locked else ''}")
        print("=" * 40)
        print(
            f"Worked {totals.worked}  Half {totals.half}  "
            f"Off {totals.off}  Absent {totals.absent}  Hours {totals.hours}"
        )
        print(f"\n  Monthly salary:   {salary.monthly_salary:>12,}")
        print(f"  Days in month:    {salary.days_in_month:>12}")
        print(f"  Per day:          {money(salary.per_day):>12,}")
        print(
            f"  Paid OFF:         {salary.paid_off_count:>12} "
            f"(allowance {salary.paid_off_allowance}, unpaid {salary.unpaid_off_count})"
        )
        print(f"  Gross payable:    {money(salary.gross_payable):>12,}")
        if summary.deductions:
            print("\n  Deductions:")
            for deduction in summary.deductions:
                note = f"  {deduction.note}" if deduction.note else ""
                print(f"    {deduction.date_iso}  {money(deduction.amount):>10,}{note}")
        print(f"  Deductions total: {money(salary.deductions_total):>12,}")
        print(f"  Net payable:      {money(salary.net_payable):>12,}")
        return 0

    def _cmd_autofill(self, args: argparse.Namespace) -> int:
        """Mark unmarked past days of this month as worked."""
        if self.store.get_worker(args.worker_id) is None:
            raise WorkerNotFoundError(args.worker_id)
        created = AutoFiller(self.store, today=self.today).run(args.worker_id)
        print(f"Marked {len(created)} days as worked")
        return 0

    def _remote(self) -> LedgerRemote | None:
        remote = self.remote_factory()
        if remote is None:
            print("SYNC_URL is not configured", file=sys.stderr)
        return remote

    def _cmd_sync(self, args: argparse.Namespace) -> int:
        """Fetch the remote ledger, or upload the local one if remote is empty."""
        remote = self._remote()
        if remote is None:
            return 1
        reconciler = SyncReconciler(self.store, remote)
        ledger = asyncio.run(reconciler.bootstrap())
        print(f"Sync {reconciler.status.value}: {len(ledger.workers)} workers")
        if reconciler.last_error:
            print(f"  {reconciler.last_error}", file=sys.stderr)
            return 1
        return 0

    def _cmd_push(self, args: argparse.Namespace) -> int:
        """Upload the local ledger."""
        remote = self._remote()
        if remote is None:
            return 1
        reconciler = SyncReconciler(self.store, remote)
        outcome = asyncio.run(reconciler.flush())
        print(f"Push {outcome.value}")
        if outcome != SyncOutcome.PUSHED:
            if reconciler.last_error:
                print(f"  {reconciler.last_error}", file=sys.stderr)
            return 1
        return 0


def main() -> int:
    """Main entry point."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cli = TrackerCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
