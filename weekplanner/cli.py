"""
CLI (Command Line Interface).

This module provides quick terminal commands for power users and for scripting, e.g.:

    weekplanner subjects
    weekplanner create <name> --semester first
    weekplanner delete <subject_id>
    weekplanner show <subject_id>
    weekplanner edit <subject_id> <week_number> <text>
    weekplanner add-resource <subject_id> <week_number> <url>
    weekplanner remove-resource <subject_id> <resource_id>
    weekplanner export <subject_id>
    weekplanner interactive [subject_id]

Note:
- The interactive wizard lives in weekplanner/interactive.py
- This CLI is intentionally simple and prints plain text (no rich formatting)
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from weekplanner import config
from weekplanner.api import PlannerClient
from weekplanner.dates import week_date_string
from weekplanner.model import normalize_semester
from weekplanner.planner import SubjectListController, SubjectPlanner, content_preview


def _make_client(args: argparse.Namespace) -> PlannerClient:
    return PlannerClient(base_url=args.api_url)


def _load_planner(client: PlannerClient, subject_id: int) -> SubjectPlanner | None:
    planner = SubjectPlanner(client, subject_id)
    if not planner.load():
        print(planner.error)
        return None
    return planner


def _cmd_subjects(args: argparse.Namespace, client: PlannerClient) -> int:
    """
    List all subjects with their completion progress.
    """
    ctrl = SubjectListController(client)
    if not ctrl.load():
        print(ctrl.error)
        return 1

    if not ctrl.subjects:
        print("No subjects yet.")
        return 0

    for s in ctrl.subjects:
        done, total = ctrl.progress(s)
        print(f"{s.id} | {s.name} | {s.semester} | weeks {s.start_week}-{s.end_week} | {done}/{total} done")
    return 0


def _cmd_create(args: argparse.Namespace, client: PlannerClient) -> int:
    try:
        semester = normalize_semester(args.semester)
    except ValueError as e:
        print(e)
        return 1

    ctrl = SubjectListController(client)
    subject = ctrl.create(args.name or "", semester)
    if subject is None:
        print(ctrl.error)
        return 1

    print(f"Created: {subject.id} | {subject.name} (weeks {subject.start_week}-{subject.end_week})")
    return 0


def _cmd_delete(args: argparse.Namespace, client: PlannerClient) -> int:
    ctrl = SubjectListController(client)
    if not ctrl.delete(args.subject_id):
        print(ctrl.error)
        return 1
    print(f"Deleted: {args.subject_id}")
    return 0


def _cmd_show(args: argparse.Namespace, client: PlannerClient) -> int:
    """
    Print every week of a subject with a short preview, plus repeated content warnings.
    """
    planner = _load_planner(client, args.subject_id)
    if planner is None:
        return 1

    subject = planner.subject
    assert subject is not None
    today = date.today()

    print(f"{subject.name} | {subject.semester} | weeks {subject.start_week}-{subject.end_week}")
    for week in planner.ordered_weeks:
        mark = "x" if week.is_complete else " "
        dates = week_date_string(week.week_number, subject.semester_start_date, today=today)
        line = f"[{mark}] Week {week.week_number} ({dates}): {content_preview(week.content)}"
        if week.resources:
            n = len(week.resources)
            line += f" ({n} resource{'s' if n != 1 else ''})"
        print(line)

    repeated = planner.repeated_content()
    if repeated:
        print("\nRepeated content:")
        for item in repeated:
            weeks = ", ".join(str(n) for n in item.week_numbers)
            print(f"- weeks {weeks}: {item.normalized_content[:60]}...")

    return 0


def _cmd_edit(args: argparse.Namespace, client: PlannerClient) -> int:
    """
    Replace the content of one week. TEXT '-' reads the content from stdin.
    """
    planner = _load_planner(client, args.subject_id)
    if planner is None:
        return 1

    if not planner.select_week(args.week):
        print(f"Week {args.week} not found.")
        return 1

    content = sys.stdin.read() if args.text == "-" else args.text
    if planner.save_week(content):
        print(f"Saved week {args.week}.")
        return 0
    if planner.error:
        print(planner.error)
        return 1
    print("No changes.")
    return 0


def _cmd_add_resource(args: argparse.Namespace, client: PlannerClient) -> int:
    url = (args.url or "").strip()
    if not url:
        print("Please provide a URL.")
        return 1

    planner = _load_planner(client, args.subject_id)
    if planner is None:
        return 1
    if not planner.select_week(args.week):
        print(f"Week {args.week} not found.")
        return 1

    if not planner.add_resource(url, args.title, args.description):
        print(planner.error)
        return 1
    print(f"Added resource to week {args.week}: {url}")
    return 0


def _cmd_remove_resource(args: argparse.Namespace, client: PlannerClient) -> int:
    planner = SubjectPlanner(client, args.subject_id)
    if not planner.delete_resource(args.resource_id):
        print(planner.error)
        return 1
    print(f"Removed resource: {args.resource_id}")
    return 0


def _cmd_export(args: argparse.Namespace, client: PlannerClient) -> int:
    """
    Download the subject's spreadsheet export.
    """
    planner = _load_planner(client, args.subject_id)
    if planner is None:
        return 1

    out_dir = args.out_dir if args.out_dir is not None else config.default_export_dir()
    path = planner.export(out_dir)
    if path is None:
        print(planner.error)
        return 1
    print(f"Exported to: {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="weekplanner", description="WeekPlanner CLI")
    parser.add_argument("--api-url", type=str, default=None, help="Backend base URL (default: $WEEKPLANNER_API_URL)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("subjects", help="List subjects with progress")

    p_create = sub.add_parser("create", help="Create a subject")
    p_create.add_argument("name", type=str, help="Subject name")
    p_create.add_argument("--semester", type=str, default="first", help="first, second or yearly")

    p_delete = sub.add_parser("delete", help="Delete a subject")
    p_delete.add_argument("subject_id", type=int)

    p_show = sub.add_parser("show", help="Show all weeks of a subject")
    p_show.add_argument("subject_id", type=int)

    p_edit = sub.add_parser("edit", help="Set the content of one week")
    p_edit.add_argument("subject_id", type=int)
    p_edit.add_argument("week", type=int, help="Week number (not index)")
    p_edit.add_argument("text", type=str, help="New content, or '-' to read stdin")

    p_add = sub.add_parser("add-resource", help="Attach a URL to a week")
    p_add.add_argument("subject_id", type=int)
    p_add.add_argument("week", type=int, help="Week number (not index)")
    p_add.add_argument("url", type=str)
    p_add.add_argument("--title", type=str, default=None)
    p_add.add_argument("--description", type=str, default=None)

    p_rm = sub.add_parser("remove-resource", help="Delete a resource")
    p_rm.add_argument("subject_id", type=int)
    p_rm.add_argument("resource_id", type=int)

    p_export = sub.add_parser("export", help="Download the .xlsx planning export")
    p_export.add_argument("subject_id", type=int)
    p_export.add_argument("--out-dir", type=Path, default=None, help="Target folder (default: ~/Downloads)")

    p_int = sub.add_parser("interactive", help="Interactive week-by-week wizard")
    p_int.add_argument("subject_id", type=int, nargs="?", default=None)

    return parser


COMMANDS = {
    "subjects": _cmd_subjects,
    "create": _cmd_create,
    "delete": _cmd_delete,
    "show": _cmd_show,
    "edit": _cmd_edit,
    "add-resource": _cmd_add_resource,
    "remove-resource": _cmd_remove_resource,
    "export": _cmd_export,
}


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    with _make_client(args) as client:
        if args.command == "interactive":
            from weekplanner.interactive import run_interactive

            run_interactive(client, subject_id=args.subject_id)
            raise SystemExit(0)

        handler = COMMANDS.get(args.command)
        if handler is None:
            raise SystemExit(2)
        raise SystemExit(handler(args, client))
