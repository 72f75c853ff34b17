"""Operator tool for inspecting and resetting booking counters."""
from __future__ import annotations

import argparse
import sys
from collections.abc import Mapping, Sequence

from encore_counters.core.categories import CounterCategory
from encore_counters.core.errors import CounterError, InvalidRequest
from encore_counters.core.rollover import CounterRecord
from encore_counters.db.session import create_tables, session_scope
from encore_counters.scripts.migrate import run_upgrade_head
from encore_counters.services.counters import CounterService, get_counter_service

_HEADER = f"{'counter':<16}{'today':>8}{'week':>8}{'month':>8}{'year':>8}{'total':>10}"


def format_counters(records: Mapping[CounterCategory | str, CounterRecord]) -> str:
    """Render counters as a fixed-width table."""
    lines = [_HEADER]
    for name, record in records.items():
        label = name.value if isinstance(name, CounterCategory) else name
        lines.append(
            f"{label:<16}{record.daily_count:>8}{record.weekly_count:>8}"
            f"{record.monthly_count:>8}{record.yearly_count:>8}{record.total_count:>10}"
        )
    return "\n".join(lines)


def run(
    command: str,
    service: CounterService,
    *,
    confirmed: bool = False,
    staff_id: str | None = None,
) -> str:
    """Execute ``command`` against ``service`` and return the text to print."""
    if command == "init":
        return format_counters(service.initialize())
    if command == "show":
        return format_counters(service.get_all())
    if command == "staff":
        return format_counters(service.list_staff())
    if command == "reset-time-based":
        return format_counters(service.reset_time_based())
    if command == "reset-all":
        if not confirmed:
            raise InvalidRequest("reset-all erases lifetime totals; pass --yes to confirm")
        return format_counters(service.reset_all())
    if command == "staff-reset":
        if staff_id is not None:
            return format_counters(service.reset_staff(staff_id))
        if not confirmed:
            raise InvalidRequest("staff-reset without --staff-id clears every staff counter; pass --yes")
        return format_counters(service.reset_staff())
    raise InvalidRequest(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Inspect or reset booking counters")
    parser.add_argument(
        "command",
        choices=[
            "create-tables",
            "migrate",
            "init",
            "show",
            "staff",
            "staff-reset",
            "reset-time-based",
            "reset-all",
        ],
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm destructive commands (reset-all, staff-reset for all staff).",
    )
    parser.add_argument(
        "--staff-id",
        help="Staff member whose counters staff-reset clears.",
    )
    args = parser.parse_args(argv)

    if args.command == "create-tables":
        create_tables()
        print("[counters] tables created")
        return

    if args.command == "migrate":
        run_upgrade_head()
        print("[counters] schema upgraded to head")
        return

    with session_scope() as db:
        try:
            service = get_counter_service(db)
            print(run(args.command, service, confirmed=args.yes, staff_id=args.staff_id))
        except CounterError as exc:
            print(f"[counters] ERROR: {exc.message}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
