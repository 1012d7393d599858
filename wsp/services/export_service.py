"""
CSV exports: a user's weekly task table and the company user list.
"""

import csv
import io
import re
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from wsp.models.domain.planner_domain import DAYS, Company, Profile, Role, Task

NO_TASKS_ROW = ["", "No tasks for this week."]
UNASSIGNED = "Unassigned"


def _cell(value) -> str:
    # One task per line inside a cell
    return re.sub(r"\r\n|\n|\r", " ", str(value))


def _render(rows: list[list]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for row in rows:
        writer.writerow([_cell(value) for value in row])
    return buffer.getvalue()


def weekly_tasks_csv(user: Profile, tasks: Iterable[Task], start_week: int, end_week: int) -> str:
    """
    One block per week: a header row of (day, Status, Time (m)) triples and one
    row per task index, Monday through Sunday side by side.
    """
    by_week: dict[int, dict[str, list[Task]]] = defaultdict(lambda: defaultdict(list))
    for task in tasks:
        if start_week <= task.week_number <= end_week:
            by_week[task.week_number][task.day.value].append(task)

    rows: list[list] = [
        ["User Name:", user.name],
        ["Week Range:", f"{start_week} to {end_week}"],
        [],
    ]
    header = [""] + [column for day in DAYS for column in (day.value, "Status", "Time (m)")]

    for week in range(start_week, end_week + 1):
        rows.append(["Week:", week])
        rows.append(header)

        week_tasks = by_week.get(week, {})
        max_per_day = max((len(week_tasks.get(day.value, [])) for day in DAYS), default=0)
        if max_per_day == 0:
            rows.append(NO_TASKS_ROW)
        for index in range(max_per_day):
            row: list = [f"Task {index + 1}"]
            for day in DAYS:
                day_tasks = week_tasks.get(day.value, [])
                if index < len(day_tasks):
                    task = day_tasks[index]
                    row.extend([task.text, task.status.value, task.time_taken])
                else:
                    row.extend(["", "", ""])
            rows.append(row)
        rows.append([])

    return _render(rows)


def weekly_tasks_filename(user: Profile, start_week: int, end_week: int) -> str:
    safe_name = re.sub(r"\s+", "_", user.name)
    return f"wsp_table_{safe_name}_W{start_week}-W{end_week}.csv"


def user_list_csv(profiles: Iterable[Profile], companies: Iterable[Company]) -> str:
    """Companies side by side (sorted by name, Unassigned last), superadmins left out."""
    ordered = sorted(companies, key=lambda c: c.name.lower())
    columns = [(c.id, c.name) for c in ordered] + [(None, UNASSIGNED)]
    known_ids = {c.id for c in ordered}

    members: dict[str | None, list[Profile]] = {company_id: [] for company_id, _ in columns}
    for profile in profiles:
        if profile.role == Role.SUPERADMIN:
            continue
        key = profile.company_id if profile.company_id in known_ids else None
        members[key].append(profile)
    for users in members.values():
        users.sort(key=lambda p: p.name.lower())

    rows: list[list] = [
        [cell for _, name in columns for cell in (name, "", "")],
        [cell for _ in columns for cell in ("Name", "Email", "Role")],
    ]
    depth = max((len(users) for users in members.values()), default=0)
    for index in range(depth):
        row: list = []
        for company_id, _ in columns:
            users = members[company_id]
            if index < len(users):
                row.extend([users[index].name, users[index].email, users[index].role.value])
            else:
                row.extend(["", "", ""])
        rows.append(row)

    return _render(rows)


def user_list_filename(today: date | None = None) -> str:
    return f"wsp_user_list_{(today or date.today()).isoformat()}.csv"
