"""Progress calculations behind the dashboard and sidebar.

Pure functions over already-loaded habits and logs: streaks, the
GitHub-style contribution graph, weekly and today's progress, plus the
small labels the views show next to them. Nothing here touches the store.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Sequence, Set

from gitconsistent.config import Config
from gitconsistent.schemas import Habit, HabitLog
from gitconsistent.utils.dates import (
    MONTH_ABBRS,
    SHORT_DAY_NAMES,
    day_of_year,
    days_between,
    end_of_week,
    narrow_weekday,
    parse_date,
    to_date_str,
    weekday_index,
)

DAYS_IN_WEEK = 7
MIN_LABEL_SPACING_COLUMNS = 3
MAX_LEVEL = 4
WEEKDAY_LABELS = ["", "M", "", "W", "", "F", ""]

STOIC_QUOTES = [
    "The best revenge is to be unlike him who performed the injury. - Marcus Aurelius",
    "Waste no more time arguing about what a good man should be. Be one. - Marcus Aurelius",
    "It is not death that a man should fear, but he should fear never beginning to live. - Marcus Aurelius",
    "The happiness of your life depends upon the quality of your thoughts. - Marcus Aurelius",
    "If it is not right, do not do it; if it is not true, do not say it. - Marcus Aurelius",
    "Wealth consists not in having great possessions, but in having few wants. - Epictetus",
    "First say to yourself what you would be; and then do what you have to do. - Epictetus",
    "It's not what happens to you, but how you react to it that matters. - Epictetus",
    "We suffer more often in imagination than in reality. - Seneca",
    "Luck is what happens when preparation meets opportunity. - Seneca",
    "Difficulties strengthen the mind, as labor does the body. - Seneca",
    "Begin at once to live, and count each separate day as a separate life. - Seneca",
]


def _completed_dates(habit_id: str, logs: Iterable[HabitLog]) -> Set[str]:
    return {log.date for log in logs if log.habit_id == habit_id and log.completed}


def _count_back(completed: Set[str], start: date) -> int:
    streak = 0
    cursor = start
    while to_date_str(cursor) in completed:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def is_completed_on(habit_id: str, logs: Iterable[HabitLog], day: str) -> bool:
    return any(log.habit_id == habit_id and log.date == day and log.completed for log in logs)


def longest_current_daily_streak(habits: Sequence[Habit], logs: Sequence[HabitLog], today: date) -> int:
    """Longest run of completed days ending today across daily habits."""
    best = 0
    for habit in habits:
        if habit.frequency != "daily":
            continue
        best = max(best, _count_back(_completed_dates(habit.id, logs), today))
    return best


def individual_daily_streak(habit: Habit, logs: Sequence[HabitLog], today: date) -> int:
    """Current streak for one daily habit.

    A streak still counts when today is not done yet but yesterday was.
    """
    if habit.frequency != "daily":
        return 0
    completed = _completed_dates(habit.id, logs)
    if to_date_str(today) in completed:
        return _count_back(completed, today)
    return _count_back(completed, today - timedelta(days=1))


def contribution_level(count: int) -> int:
    if count <= 0:
        return 0
    return min(count, MAX_LEVEL)


def build_contribution_graph(
    logs: Sequence[HabitLog],
    today: date,
    weeks: int = Config.GRAPH_WEEKS,
) -> Dict[str, Any]:
    """Lay out a Sunday-start calendar heatmap ending with this week.

    Cells run column by column (one column per week, Sunday at the top).
    Future cells in the current week are present but always level 0.
    """
    grid_end = end_of_week(today)
    grid_start = grid_end - timedelta(days=weeks * DAYS_IN_WEEK - 1)

    counts: Counter = Counter()
    for log in logs:
        if not log.completed:
            continue
        try:
            log_day = parse_date(log.date)
        except ValueError:
            continue
        if grid_start <= log_day <= grid_end:
            counts[log.date] += 1

    days: List[Dict[str, Any]] = []
    month_labels: List[Dict[str, Any]] = []
    labelled_months: Set[int] = set()
    last_label_column = -MIN_LABEL_SPACING_COLUMNS

    for index, cell in enumerate(days_between(grid_start, grid_end)):
        key = to_date_str(cell)
        count = counts.get(key, 0)
        level = contribution_level(count) if cell <= today else 0
        days.append({"date": key, "count": count, "level": level})

        column = index // DAYS_IN_WEEK
        year_month = cell.year * 100 + cell.month
        if year_month in labelled_months or cell.day > DAYS_IN_WEEK:
            continue
        if column >= last_label_column + MIN_LABEL_SPACING_COLUMNS:
            month_labels.append({"name": MONTH_ABBRS[cell.month - 1], "weekIndex": column})
            last_label_column = column
            labelled_months.add(year_month)

    return {
        "startDate": to_date_str(grid_start),
        "endDate": to_date_str(grid_end),
        "weeks": weeks,
        "days": days,
        "monthLabels": month_labels,
        "weekdayLabels": list(WEEKDAY_LABELS),
    }


def applies_on(habit: Habit, day: date) -> bool:
    if habit.frequency == "daily":
        return True
    return weekday_index(day) in (habit.target_days or [])


def weekly_progress(habits: Sequence[Habit], logs: Sequence[HabitLog], today: date) -> List[Dict[str, Any]]:
    """Completed vs. applicable habits for each of the last seven days, oldest first."""
    points = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        key = to_date_str(day)
        applicable = [h for h in habits if applies_on(h, day)]
        completed = sum(1 for h in applicable if is_completed_on(h.id, logs, key))
        if applicable:
            percentage = max(0.0, min(100.0, completed / len(applicable) * 100))
        else:
            percentage = 0.0
        points.append(
            {
                "date": key,
                "name": narrow_weekday(day),
                "completed": completed,
                "totalApplicable": len(applicable),
                "percentage": round(percentage, 1),
            }
        )
    return points


def today_progress(habits: Sequence[Habit], logs: Sequence[HabitLog], today: date) -> Dict[str, Any]:
    key = to_date_str(today)
    applicable = [h for h in habits if applies_on(h, today)]
    completed = sum(1 for h in applicable if is_completed_on(h.id, logs, key))
    total = len(applicable)
    if total == 0:
        data = [{"name": "No Habits Due", "value": 1}]
    else:
        data = [
            {"name": "Completed", "value": completed},
            {"name": "Pending", "value": total - completed},
        ]
    return {
        "completed": completed,
        "total": total,
        "percentage": math.floor(completed / total * 100 + 0.5) if total else 0,
        "data": data,
    }


def frequency_label(habit: Habit) -> str:
    if habit.frequency == "daily":
        return "Daily"
    days = sorted(set(habit.target_days or []))
    if len(days) == DAYS_IN_WEEK:
        return "Daily (Weekly Target)"
    if days:
        return ", ".join(SHORT_DAY_NAMES[d] for d in days)
    return "Weekly"


def daily_quote(today: date) -> str:
    return STOIC_QUOTES[day_of_year(today) % len(STOIC_QUOTES)]


def logs_for_habit(habit_id: str, logs: Iterable[HabitLog]) -> List[HabitLog]:
    return [log for log in logs if log.habit_id == habit_id]


def habit_summary(
    habit: Habit,
    logs: Sequence[HabitLog],
    today: date,
    graph: bool = False,
) -> Dict[str, Any]:
    """API view of one habit with its completion state for ``today``."""
    own_logs = logs_for_habit(habit.id, logs)
    out = habit.to_api()
    out["frequencyLabel"] = frequency_label(habit)
    out["completedToday"] = is_completed_on(habit.id, own_logs, to_date_str(today))
    out["streak"] = individual_daily_streak(habit, own_logs, today)
    if graph:
        out["graph"] = build_contribution_graph(own_logs, today)
    return out
