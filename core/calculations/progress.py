"""
Project Progress Calculation Functions

Folds operations (work-order quantity + ordered process steps with running
counts) into per-project completion percentages, bottleneck flags and a
per-step breakdown.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from core.models import Operation, ProjectProgress, StepProgress

logger = logging.getLogger(__name__)

# A step lagging its predecessor by more than this many units is a bottleneck
BOTTLENECK_THRESHOLD = 5

BAND_COMPLETE = "complete"
BAND_ON_TRACK = "on_track"
BAND_BEHIND = "behind"

BAND_COLORS = {
    BAND_COMPLETE: '#10b981',  # Green
    BAND_ON_TRACK: '#3b82f6',  # Blue
    BAND_BEHIND: '#f59e0b',    # Amber
}

OperationLike = Union[Operation, Dict[str, Any]]


def _as_operation(item: OperationLike) -> Operation:
    if isinstance(item, Operation):
        return item
    return Operation.from_payload(item)


def has_bottleneck(operation: Operation, threshold: int = BOTTLENECK_THRESHOLD) -> bool:
    """
    Check whether any step lags the one before it by more than threshold units.

    The first step is compared against the work-order quantity.
    """
    previous = operation.order_quantity
    for step in operation.steps:
        if previous - step.current_count > threshold:
            return True
        previous = step.current_count
    return False


def aggregate_progress(operations: Optional[Iterable[OperationLike]]) -> List[ProjectProgress]:
    """
    Aggregate operations into per-project progress.

    Per operation:
    - target units += number of steps × work-order quantity
    - actual units += each step's current count
    - bottleneck if any step drops more than 5 units from the previous step
      (or from the quantity, for the first step)

    Steps with the same name are summed across a project's operations for the
    detail breakdown, each contributing the work-order quantity as target.

    Args:
        operations: Operation objects or raw `operaciones` payload dicts

    Returns:
        ProjectProgress list in order of first appearance of each project
    """
    if not operations:
        return []

    projects: Dict[str, ProjectProgress] = {}
    skipped = 0

    for item in operations:
        if item is None:
            continue
        operation = _as_operation(item)
        if operation.project_id is None:
            skipped += 1
            continue

        progress = projects.get(operation.project_id)
        if progress is None:
            progress = ProjectProgress(
                project_id=operation.project_id,
                project_name=operation.project_name,
            )
            projects[operation.project_id] = progress

        quantity = operation.order_quantity
        progress.target_units += len(operation.steps) * quantity

        for step in operation.steps:
            progress.actual_units += step.current_count

            detail = progress.steps.setdefault(step.name, StepProgress())
            detail.actual += step.current_count
            detail.target += quantity

        if has_bottleneck(operation):
            progress.has_bottleneck = True

    if skipped:
        logger.warning(f"Skipped {skipped} operation(s) without a project")

    result = list(projects.values())
    logger.info(f"Aggregated progress for {len(result)} project(s)")
    return result


def completion_band(percent: int) -> str:
    """Presentation band: complete at 100%, on track from 50%, otherwise behind."""
    if percent >= 100:
        return BAND_COMPLETE
    if percent >= 50:
        return BAND_ON_TRACK
    return BAND_BEHIND


def progress_to_dataframe(projects: List[ProjectProgress]) -> pd.DataFrame:
    """One row per project with completion percent and band."""
    columns = [
        'project_id', 'project', 'target_units', 'actual_units',
        'completion_percent', 'has_bottleneck', 'band'
    ]
    if not projects:
        return pd.DataFrame(columns=columns)

    rows = []
    for project in projects:
        row = project.to_dict()
        row['band'] = completion_band(project.completion_percent)
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def step_breakdown_to_dataframe(project: ProjectProgress) -> pd.DataFrame:
    """Per-step actual/target/percent table for a project's detail view."""
    rows = [
        {'step': name, 'actual': detail.actual, 'target': detail.target, 'percent': detail.percent}
        for name, detail in project.steps.items()
    ]
    return pd.DataFrame(rows, columns=['step', 'actual', 'target', 'percent'])
