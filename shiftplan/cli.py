"""Command-line interface for the shift planner."""

from __future__ import annotations

import argparse
import sys

from sqlalchemy.orm import Session

from shiftplan.config import SchedulerConfig, load_config
from shiftplan.domain.db import get_session, init_database
from shiftplan.domain.repositories import ProfileRepository
from shiftplan.exceptions import NotFoundError, SchedulingError
from shiftplan.io.export_csv import export_assignments_csv, export_matrix_csv, matrix_to_dataframe
from shiftplan.io.import_csv import import_profiles_csv, import_templates_csv
from shiftplan.log import configure_logging
from shiftplan.services.assignments import AssignmentService
from shiftplan.services.availability import check_availability, currently_working
from shiftplan.services.matrix import load_week_matrix, resolve_week, week_assignments
from shiftplan.services.time_window import ShiftWindow


def _split(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _actor(session: Session, user_id: str):
    actor = ProfileRepository.get_by_id(session, user_id)
    if actor is None:
        raise NotFoundError(f"User {user_id} not found")
    return actor


def _week(args: argparse.Namespace, cfg: SchedulerConfig):
    return resolve_week(args.week_id, offset=args.offset, cfg=cfg)


def _cmd_init_db(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    """Initialize the database."""
    init_database(cfg.db_url)
    print(f"[OK] Database initialized: {cfg.db_url}")


def _cmd_import_csv(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    """Import CSV data into database."""
    if args.profiles:
        count = import_profiles_csv(session, args.profiles)
        print(f"[OK] Imported {count} profiles")
    if args.templates:
        count = import_templates_csv(session, args.templates)
        print(f"[OK] Imported {count} shift templates")


def _cmd_assign(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    service = AssignmentService(session, cfg)
    a = service.assign_shift(_actor(session, args.actor), args.user, args.date, args.template)
    print(f"[OK] {a.user_id} on {a.date}: {ShiftWindow.from_record(a).label()}")


def _cmd_remove(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    service = AssignmentService(session, cfg)
    removed = service.remove_shift(_actor(session, args.actor), args.user, args.date)
    print("[OK] Shift removed" if removed else "[OK] No shift to remove")


def _report_batch(result) -> None:
    print(f"[OK] {result.written}/{result.requested} assignments written")
    for row in result.failed:
        print(f"[ERROR] {row.user_id} on {row.date}: {row.error}")


def _cmd_bulk_assign(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    service = AssignmentService(session, cfg)
    result = service.bulk_assign_shifts(
        _actor(session, args.actor), _split(args.users), _split(args.dates), args.template
    )
    _report_batch(result)


def _cmd_copy(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    service = AssignmentService(session, cfg)
    result = service.copy_shifts(
        _actor(session, args.actor), args.source, _split(args.targets), args.start, args.end
    )
    _report_batch(result)


def _cmd_week(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    """Print the week matrix."""
    week = _week(args, cfg)
    users, matrix = load_week_matrix(session, week)
    names = {u.id: u.full_name for u in users}
    df = matrix_to_dataframe(matrix, names)
    print(f"Week {week.week_id} ({week.start} .. {week.end})")
    print(df.drop(columns=["user_id"]).to_string(index=False) if not df.empty else "No users.")


def _cmd_working_now(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    user_ids = currently_working(session, cfg)
    if not user_ids:
        print("Nobody is on shift right now.")
        return
    for uid in user_ids:
        profile = ProfileRepository.get_by_id(session, uid)
        print(f"{uid}\t{profile.full_name if profile else ''}")


def _cmd_availability(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    report = check_availability(session, args.user, args.date)
    if report.is_scheduled:
        print(f"Scheduled: {ShiftWindow.from_record(report.schedule).label()}")
    else:
        print("Scheduled: no")
    for e in report.events:
        print(f"Event: {e.title} ({e.event_type}, {e.status.value})")
    for r in report.routines:
        print(f"Routine: {r.title}")
    if report.warning:
        print(f"[WARN] {report.warning}")


def _cmd_export(args: argparse.Namespace, cfg: SchedulerConfig, session: Session) -> None:
    """Export the week to CSV."""
    week = _week(args, cfg)
    if args.matrix:
        users, matrix = load_week_matrix(session, week)
        count = export_matrix_csv(matrix, args.matrix, {u.id: u.full_name for u in users})
        print(f"[OK] Exported {count} users to {args.matrix}")
    if args.assignments:
        count = export_assignments_csv(week_assignments(session, week), args.assignments)
        print(f"[OK] Exported {count} assignments to {args.assignments}")


def _add_week_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--week-id", help="ISO week (e.g., 2025-W48); overrides --offset")
    p.add_argument("--offset", type=int, default=0, help="Weeks from the current week (default: 0)")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(prog="shiftplan", description="Team shift and availability planner")

    # Global options
    parser.add_argument("--config", help="Path to config YAML/JSON")
    parser.add_argument("--db", help="Database URL (overrides config)")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Initialize database")
    init.set_defaults(func=_cmd_init_db)

    imp = sub.add_parser("import-csv", help="Import profiles/templates from CSV")
    imp.add_argument("--profiles", help="Path to profiles CSV")
    imp.add_argument("--templates", help="Path to shift templates CSV")
    imp.set_defaults(func=_cmd_import_csv)

    asg = sub.add_parser("assign", help="Assign a shift template to a user on a date")
    asg.add_argument("--as", dest="actor", required=True, help="Acting admin user id")
    asg.add_argument("--user", required=True)
    asg.add_argument("--date", required=True, help="YYYY-MM-DD")
    asg.add_argument("--template", required=True, type=int)
    asg.set_defaults(func=_cmd_assign)

    rem = sub.add_parser("remove", help="Remove a user's shift on a date")
    rem.add_argument("--as", dest="actor", required=True, help="Acting admin user id")
    rem.add_argument("--user", required=True)
    rem.add_argument("--date", required=True)
    rem.set_defaults(func=_cmd_remove)

    bulk = sub.add_parser("bulk-assign", help="Assign a template to users x dates")
    bulk.add_argument("--as", dest="actor", required=True, help="Acting admin user id")
    bulk.add_argument("--users", required=True, help="Comma-separated user ids")
    bulk.add_argument("--dates", required=True, help="Comma-separated dates")
    bulk.add_argument("--template", required=True, type=int)
    bulk.set_defaults(func=_cmd_bulk_assign)

    cp = sub.add_parser("copy", help="Copy a user's shifts in a date range to other users")
    cp.add_argument("--as", dest="actor", required=True, help="Acting admin user id")
    cp.add_argument("--source", required=True)
    cp.add_argument("--targets", required=True, help="Comma-separated user ids")
    cp.add_argument("--start", required=True)
    cp.add_argument("--end", required=True)
    cp.set_defaults(func=_cmd_copy)

    wk = sub.add_parser("week", help="Show the week schedule matrix")
    _add_week_args(wk)
    wk.set_defaults(func=_cmd_week)

    now = sub.add_parser("working-now", help="List users currently on shift")
    now.set_defaults(func=_cmd_working_now)

    av = sub.add_parser("availability", help="Check a user's availability on a date")
    av.add_argument("--user", required=True)
    av.add_argument("--date", required=True)
    av.set_defaults(func=_cmd_availability)

    exp = sub.add_parser("export", help="Export a week to CSV")
    _add_week_args(exp)
    exp.add_argument("--matrix", help="Path to export the week matrix CSV")
    exp.add_argument("--assignments", help="Path to export the assignment list CSV")
    exp.set_defaults(func=_cmd_export)

    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    if args.db:
        cfg.db_url = args.db
    configure_logging(cfg.log_level, cfg.log_file)

    session = get_session(cfg.db_url)
    try:
        args.func(args, cfg, session)
    except SchedulingError as e:
        session.rollback()
        print(f"[ERROR] {e}")
        return 1
    finally:
        session.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
