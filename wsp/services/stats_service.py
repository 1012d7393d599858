"""
Dashboard statistics over a week range of one user's tasks.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from wsp.models.domain.planner_domain import Task, TaskStatus


@dataclass
class TaskStats:
    start_week: int
    end_week: int
    total_tasks: int = 0
    total_time: int = 0
    counts: dict[TaskStatus, int] = field(default_factory=lambda: {s: 0 for s in TaskStatus})
    time_by_status: dict[TaskStatus, int] = field(default_factory=lambda: {s: 0 for s in TaskStatus})

    @property
    def percentages(self) -> dict[TaskStatus, float]:
        if not self.total_tasks:
            return {status: 0.0 for status in TaskStatus}
        return {status: count / self.total_tasks * 100 for status, count in self.counts.items()}


def compute_task_stats(tasks: Iterable[Task], start_week: int, end_week: int) -> TaskStats:
    stats = TaskStats(start_week=start_week, end_week=end_week)
    for task in tasks:
        if not start_week <= task.week_number <= end_week:
            continue
        minutes = task.time_taken or 0
        stats.counts[task.status] += 1
        stats.time_by_status[task.status] += minutes
        stats.total_tasks += 1
        stats.total_time += minutes
    return stats


def format_minutes(total_minutes: int) -> str:
    """90 -> '1h 30m', 60 -> '1h', 0 -> '0m'."""
    if total_minutes < 1:
        return "0m"
    hours, minutes = divmod(int(total_minutes), 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    return " ".join(parts)


def stats_title(user_name: str, start_week: int, end_week: int) -> str:
    if start_week == end_week:
        return f"Week {start_week} Analysis for {user_name}"
    return f"Weeks {start_week}-{end_week} Analysis for {user_name}"
