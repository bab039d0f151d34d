"""
Operator Timeline Calculation Functions

Turns the process assignments of one operator on one day into a sorted list
of work intervals, plus the helpers used by the operator page (project
filter, shift utilization, estimate comparison).
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from core.calculations.durations import diff_minutes, now_utc, round_half_up
from core.models import (
    NOT_AVAILABLE,
    Interval,
    Operator,
    ProcessAssignment,
    TimelineResult,
)

logger = logging.getLogger(__name__)

ALL_PROJECTS = "ALL_PROJECTS"

# Actual duration above estimate × this factor is flagged as slow
SLOW_FACTOR = 1.1

AssignmentLike = Union[ProcessAssignment, Dict[str, Any]]


def _as_assignment(item: AssignmentLike) -> ProcessAssignment:
    if isinstance(item, ProcessAssignment):
        return item
    return ProcessAssignment.from_payload(item)


def build_timeline(
    assignments: Optional[Iterable[AssignmentLike]],
    now: Optional[datetime] = None
) -> TimelineResult:
    """
    Build an operator's work timeline from their process assignments.

    - Assignments that never started are skipped.
    - Open assignments end at `now` and are flagged as in progress.
    - Duration is the server-computed actual minutes when present, otherwise
      the wall-clock difference; rounded half-up to whole minutes.
    - Zero-minute intervals are dropped.
    - Intervals are stably sorted by start.

    Args:
        assignments: ProcessAssignment objects or raw API payload dicts
        now: Reference instant for open assignments (defaults to current UTC time)

    Returns:
        TimelineResult with sorted intervals and total worked minutes
    """
    if not assignments:
        return TimelineResult()

    now = now or now_utc()
    intervals: List[Interval] = []

    for item in assignments:
        if item is None:
            continue
        assignment = _as_assignment(item)
        if assignment.started_at is None:
            continue

        start = assignment.started_at
        end = assignment.ended_at or now

        if assignment.actual_minutes is not None:
            raw_minutes = assignment.actual_minutes
        else:
            raw_minutes = diff_minutes(start, end)

        minutes = round_half_up(raw_minutes)
        if minutes <= 0:
            continue

        intervals.append(Interval(
            start=start,
            end=end,
            minutes=minutes,
            kind="work",
            machine_name=assignment.machine_name or NOT_AVAILABLE,
            operation=assignment.operation_name or NOT_AVAILABLE,
            project=assignment.project_name or NOT_AVAILABLE,
            estimated_minutes=assignment.estimated_minutes or 0.0,
            in_progress=assignment.ended_at is None,
        ))

    # sorted() is stable, so equal starts keep their input order
    intervals = sorted(intervals, key=lambda itv: itv.start)
    total = sum(itv.minutes for itv in intervals)

    logger.debug(f"Built timeline: {len(intervals)} intervals, {total} min")
    return TimelineResult(intervals=intervals, total_work_minutes=total)


def unique_projects(intervals: Iterable[Interval]) -> List[str]:
    """Sorted distinct project labels, excluding the placeholder label."""
    return sorted({itv.project for itv in intervals if itv.project and itv.project != NOT_AVAILABLE})


def filter_by_project(intervals: List[Interval], project: Optional[str]) -> List[Interval]:
    """Keep intervals of one project; None or ALL_PROJECTS keeps everything."""
    if not project or project == ALL_PROJECTS:
        return list(intervals)
    return [itv for itv in intervals if itv.project == project]


def utilization_percent(total_work_minutes: int, shift_minutes: float) -> int:
    """
    Share of the shift spent on recorded work.

    Not clamped: overtime shows as more than 100%.
    """
    if shift_minutes <= 0:
        return 0
    return round_half_up(total_work_minutes / shift_minutes * 100)


def duration_verdict(interval: Interval) -> str:
    """
    Compare actual minutes with the estimate.

    Returns:
        'faster' if below estimate, 'slower' if more than 10% over,
        'neutral' otherwise or when there is nothing to compare
    """
    if interval.minutes <= 0 or interval.estimated_minutes <= 0:
        return "neutral"
    if interval.minutes < interval.estimated_minutes:
        return "faster"
    if interval.minutes > interval.estimated_minutes * SLOW_FACTOR:
        return "slower"
    return "neutral"


def valid_operators(operators: Iterable[Operator]) -> List[Operator]:
    """Operators that can be queried (non-empty code), in API order."""
    return [op for op in operators if op.code]


def intervals_to_dataframe(intervals: List[Interval]) -> pd.DataFrame:
    """
    Convert intervals to a DataFrame for tables and the Gantt chart.

    Returns:
        DataFrame with one row per interval plus a 'verdict' column,
        or an empty DataFrame with the same columns
    """
    columns = [
        'start', 'end', 'minutes', 'kind', 'machine', 'operation',
        'project', 'estimated_minutes', 'in_progress', 'verdict'
    ]
    if not intervals:
        return pd.DataFrame(columns=columns)

    rows = []
    for itv in intervals:
        row = itv.to_dict()
        row['verdict'] = duration_verdict(itv)
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)
