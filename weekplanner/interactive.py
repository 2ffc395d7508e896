from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from weekplanner import config
from weekplanner.api import PlannerClient
from weekplanner.dates import format_range, week_date_string
from weekplanner.model import SEMESTERS, normalize_semester
from weekplanner.planner import SubjectListController, SubjectPlanner, content_preview
from weekplanner.stepper import STEP_WIDTH, Stepper


console = Console()


def _println(msg: str | Text = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg, markup=False)


def _show_error(error: Optional[str]) -> None:
    if error:
        _println(Panel(Text(error, style="bold red"), box=box.ROUNDED, title="Error"))


def render_stepper(stepper: Stepper, semester_start: Optional[str], today: date) -> Text:
    """
    Draw the stepper cropped to its viewport, so the row never exceeds
    `client_width` columns plus the two affordance gutters.
    """
    views = stepper.steps_view()

    row = Text()
    for v in views:
        if v.is_current:
            label, style = f"● W{v.week_number}", "bold reverse cyan"
        elif v.is_completed:
            label, style = f"✓ W{v.week_number}", "green"
        else:
            label, style = f"○ W{v.week_number}", "dim"
        row.append(label.center(int(stepper.step_width)), style=style)
        if v.connector_completed is not None:
            width = int(stepper.connector_width)
            row.append("━" * width if v.connector_completed else "─" * width,
                       style="green" if v.connector_completed else "dim")

    start = int(round(stepper.scroll_left))
    window = row[start:start + int(stepper.client_width)]

    line = Text()
    line.append("‹ " if stepper.can_scroll_left else "  ", style="bold")
    line.append_text(window)
    line.append(" ›" if stepper.can_scroll_right else "  ", style="bold")

    current = stepper.current
    line.append(f"\n  Week {current}: {week_date_string(current, semester_start, today=today)}", style="cyan")
    return line


def run_interactive(client: PlannerClient, subject_id: Optional[int] = None) -> None:
    """
    Interactive menu loop: pick a subject, then walk its weeks.
    """
    if subject_id is not None:
        _flow_wizard(client, subject_id)
        return

    ctrl = SubjectListController(client)
    ctrl.load()

    while True:
        _print_subjects(ctrl)

        choice = _prompt(
            "\n[number] Open subject\n"
            "[n] New subject\n"
            "[d] Delete subject\n"
            "[r] Reload\n"
            "[0] Exit\n"
            "Select: "
        ).strip().lower()

        ctrl.dismiss_error()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "n":
            _flow_create(ctrl)
        elif choice == "d":
            _flow_delete(ctrl)
        elif choice == "r":
            ctrl.load()
        elif choice.isdigit() and 1 <= int(choice) <= len(ctrl.subjects):
            _flow_wizard(client, ctrl.subjects[int(choice) - 1].id)
            # progress may have changed
            ctrl.load()
        else:
            _println("Invalid choice.")


def _print_subjects(ctrl: SubjectListController) -> None:
    _println("\n=== WeekPlanner ===")
    _show_error(ctrl.error)

    if not ctrl.subjects:
        _println("No subjects yet. Create one with \\[n].")
        return

    table = Table(title="Subjects", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Subject")
    table.add_column("Semester")
    table.add_column("Weeks")
    table.add_column("Progress", justify="right")
    for i, s in enumerate(ctrl.subjects, start=1):
        done, total = ctrl.progress(s)
        table.add_row(
            str(i),
            f"[bold cyan]{escape(s.name)}[/]",
            s.semester.upper(),
            f"{s.start_week}-{s.end_week}",
            f"[yellow]{done}[/]/{total}",
        )
    console.print(table)


def _flow_create(ctrl: SubjectListController) -> None:
    name = _prompt("Subject name [blank = back]: ").strip()
    if not name:
        return

    raw = _prompt(f"Semester ({', '.join(SEMESTERS)}) [1st]: ").strip() or "1st"
    try:
        semester = normalize_semester(raw)
    except ValueError as e:
        _println(str(e))
        return

    subject = ctrl.create(name, semester)
    if subject is not None:
        _println(f"Created: {escape(subject.name)} (weeks {subject.start_week}-{subject.end_week})")


def _flow_delete(ctrl: SubjectListController) -> None:
    if not ctrl.subjects:
        _println("No subjects.")
        return

    pick = _prompt("Number of subject to delete [blank = cancel]: ").strip()
    if not pick:
        return
    if not pick.isdigit() or not (1 <= int(pick) <= len(ctrl.subjects)):
        _println("Out of range.")
        return

    subject = ctrl.subjects[int(pick) - 1]
    sure = _prompt(f"Delete '{subject.name}' and all its weeks? [y/N]: ").strip().lower()
    if sure != "y":
        return
    if ctrl.delete(subject.id):
        _println(f"Deleted: {escape(subject.name)}")


# ---------------------------------------------------------------------------
# Week wizard
# ---------------------------------------------------------------------------


def _flow_wizard(client: PlannerClient, subject_id: int) -> None:
    planner = SubjectPlanner(client, subject_id)
    if not planner.load():
        _show_error(planner.error)
        return

    today = date.today()
    stepper = Stepper(
        planner.week_numbers,
        current=planner.current_week_number or 1,
        completed=planner.completed_weeks,
        on_select=planner.select_week,
        client_width=max(console.width - 4, STEP_WIDTH),
    )

    # reflect the last reload; a manual scroll survives unless the current week moved
    def sync_stepper() -> None:
        stepper.resize(max(console.width - 4, STEP_WIDTH))
        stepper.set_steps(planner.week_numbers, planner.completed_weeks)
        stepper.set_current(planner.current_week_number or 1)

    while True:
        sync_stepper()
        _print_week(planner, stepper, today)

        calendar = "  [v] View calendar" if planner.all_completed else ""
        choice = _prompt(
            "\n[e] Edit content  [c] Save & continue  [w] Go to week  [< / >] Scroll steps\n"
            "[a] Add resource  [x] Delete resource  [p] Preview all weeks\n"
            f"[s] Export .xlsx{calendar}  [b] Back\n"
            "Select: "
        ).strip().lower()

        planner.dismiss_error()

        if choice == "b":
            return
        if choice == "e":
            _flow_edit(planner, advance=False)
        elif choice == "c":
            _flow_edit(planner, advance=True)
        elif choice == "w":
            pick = _prompt("Week number: ").strip()
            if not (pick.isdigit() and stepper.select(int(pick))):
                _println("No such week.")
        elif choice in ("<", ">"):
            if not stepper.scroll("left" if choice == "<" else "right"):
                _println("Still scrolling...")
        elif choice == "a":
            _flow_add_resource(planner)
        elif choice == "x":
            _flow_delete_resource(planner)
        elif choice == "p":
            _flow_preview(planner, today)
        elif choice == "s":
            _flow_export(planner)
        elif choice == "v" and planner.all_completed:
            _flow_calendar(planner, today)
        else:
            _println("Invalid choice.")


def _print_week(planner: SubjectPlanner, stepper: Stepper, today: date) -> None:
    subject = planner.subject
    assert subject is not None

    _println(f"\n=== {escape(subject.name)} | {subject.semester.upper()} semester | Weeks {subject.start_week}-{subject.end_week} ===")
    if planner.all_completed:
        _println("[green]All weeks completed.[/] Press \\[v] to view the calendar.")
    _show_error(planner.error)
    _println(render_stepper(stepper, subject.semester_start_date, today))

    week = planner.current_week
    if week is None:
        _println("No weeks available.")
        return

    body = Text(week.content if week.content.strip() else "No content yet", style="" if week.is_complete else "dim")
    _println(Panel(body, title=f"Week {week.week_number} content", box=box.ROUNDED))

    if not week.resources:
        _println("No resources added yet.")
        return

    table = Table(title="Resources", box=box.SIMPLE)
    table.add_column("ID", justify="right")
    table.add_column("Resource")
    for r in week.resources:
        label = f"[bold]{escape(r.title)}[/]\n{escape(r.url)}" if r.title else escape(r.url)
        if r.description:
            label += f"\n[dim]{escape(r.description)}[/]"
        table.add_row(str(r.id), label)
    console.print(table)


def _read_multiline(msg: str) -> str:
    _println(msg)
    lines: list[str] = []
    while True:
        line = _prompt("")
        if line == ".":
            return "\n".join(lines)
        lines.append(line)


def _flow_edit(planner: SubjectPlanner, advance: bool) -> None:
    week = planner.current_week
    if week is None:
        return

    content = week.content
    change = _prompt("Replace content? [Y/n]: ").strip().lower()
    if change != "n":
        content = _read_multiline("Enter content, finish with a single '.' line:")

    if advance:
        if not content.strip():
            _println("Week content is empty; fill it in before continuing.")
            return
        if planner.is_last_week:
            if planner.save_week(content):
                _println("Last week saved.")
            elif not planner.error:
                _println("No changes.")
            return
        if planner.save_and_continue(content):
            _println(f"Moved to week {planner.current_week_number}.")
        return

    if planner.save_week(content):
        _println("Saved.")
    elif not planner.error:
        _println("No changes.")


def _flow_add_resource(planner: SubjectPlanner) -> None:
    url = _prompt("URL * [blank = cancel]: ").strip()
    if not url:
        return
    title = _prompt("Title (optional): ").strip()
    description = _prompt("Description (optional): ").strip()
    if planner.add_resource(url, title or None, description or None):
        _println("Resource added.")


def _flow_delete_resource(planner: SubjectPlanner) -> None:
    week = planner.current_week
    if week is None or not week.resources:
        _println("No resources.")
        return
    pick = _prompt("Resource ID to delete [blank = cancel]: ").strip()
    if not pick:
        return
    ids = {r.id for r in week.resources}
    if not pick.isdigit() or int(pick) not in ids:
        _println("Unknown resource ID.")
        return
    if planner.delete_resource(int(pick)):
        _println("Resource deleted.")


def _flow_preview(planner: SubjectPlanner, today: date) -> None:
    subject = planner.subject
    assert subject is not None

    table = Table(title="Preview", box=box.SIMPLE)
    table.add_column("")
    table.add_column("Week")
    table.add_column("Dates")
    table.add_column("Content")
    table.add_column("Resources", justify="right")
    for week in planner.ordered_weeks:
        mark = "[green]✓[/]" if week.is_complete else "[dim]○[/]"
        label = f"Week {week.week_number}"
        if week.week_number == planner.current_week_number:
            label = f"[bold cyan]{label} (current)[/]"
        table.add_row(
            mark,
            label,
            week_date_string(week.week_number, subject.semester_start_date, today=today),
            escape(content_preview(week.content)),
            str(len(week.resources)) if week.resources else "",
        )
    console.print(table)

    repeated = planner.repeated_content()
    if repeated:
        _println("\n[yellow]Repeated content detected:[/]")
        for item in repeated:
            weeks = ", ".join(str(n) for n in item.week_numbers)
            _println(f"  Found in weeks: {weeks}")
            _println(f"  [dim]{escape(item.normalized_content[:150])}...[/]")

    _prompt("\nPress Enter to go back...")


def _flow_export(planner: SubjectPlanner) -> None:
    default_dir = config.default_export_dir()
    out_in = _prompt(f"Target folder [{default_dir}]: ").strip()
    out_dir = Path(out_in).expanduser() if out_in else default_dir

    path = planner.export(out_dir)
    if path is not None:
        _println(f"\nSaved to: {path.resolve()}")


def _flow_calendar(planner: SubjectPlanner, today: date) -> None:
    subject = planner.subject
    assert subject is not None

    _println(f"\n=== {escape(subject.name)} | Calendar view ===")
    for entry in planner.calendar_entries(today):
        _println(f"\n[bold]Week {entry.week_number}[/]  [dim]{format_range(entry.dates)}[/]")
        _println(f"  {escape(entry.excerpt)}")

    choice = _prompt("\n[s] Export .xlsx  [Enter] Back to planning: ").strip().lower()
    if choice == "s":
        _flow_export(planner)
