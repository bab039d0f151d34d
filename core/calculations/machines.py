"""
Machine Status Calculation Functions

Classifies live operation-process records into machine status categories and
delay tiers for the machine board.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from core.calculations.durations import minutes_since, parse_timestamp, percent_of_target
from core.models import (
    DEFAULT_CYCLE_TARGET_MINUTES,
    NO_OPERATION,
    STATE_IN_PROGRESS,
    STATE_PAUSED,
    STATUS_IDLE,
    STATUS_PAUSED,
    STATUS_RUNNING,
    MachineSnapshot,
    nested,
    to_float,
)

logger = logging.getLogger(__name__)

ACTIVE_STATES = (STATE_IN_PROGRESS, STATE_PAUSED)

# Delay tiers
TIER_ON_TIME = "on_time"
TIER_MILD_DELAY = "mild_delay"
TIER_SEVERE_DELAY = "severe_delay"
TIER_PAUSED = "paused"
TIER_NEUTRAL = "neutral"

TIER_PALETTE = {
    TIER_ON_TIME: {'color': '#10b981', 'background': '#ecfdf5', 'label': 'On time (≤ X)'},
    TIER_MILD_DELAY: {'color': '#eab308', 'background': '#fefce8', 'label': 'Mild delay (> X)'},
    TIER_SEVERE_DELAY: {'color': '#ef4444', 'background': '#fef2f2', 'label': 'Severe delay (> 2× X)'},
    TIER_PAUSED: {'color': '#f97316', 'background': '#fff7ed', 'label': 'Paused'},
    TIER_NEUTRAL: {'color': '#94a3b8', 'background': '#f8fafc', 'label': 'Idle'},
}

STATUS_FILTER_ALL = "all"


def classify(raw_status: Optional[str]) -> str:
    """
    Map a raw process state to a machine status category.

    'paused' -> paused, 'in_progress' -> running, anything else -> idle.
    Matching is case-insensitive and never raises.
    """
    if not raw_status or not isinstance(raw_status, str):
        return STATUS_IDLE

    state_lower = raw_status.strip().lower()
    if state_lower == STATE_PAUSED:
        return STATUS_PAUSED
    if state_lower == STATE_IN_PROGRESS:
        return STATUS_RUNNING
    return STATUS_IDLE


def bar_percent(elapsed_minutes: float, target_minutes: Optional[float]) -> int:
    """Progress-bar fill for a cycle: elapsed against target, clamped to 100."""
    return percent_of_target(elapsed_minutes, target_minutes)


def color_tier(machine: MachineSnapshot, now: Optional[datetime] = None) -> str:
    """
    Derive the delay tier shown on a machine card.

    Paused machines are always 'paused' regardless of elapsed time. Idle and
    maintenance machines are 'neutral'. Running machines compare elapsed
    minutes with the cycle target X: > 2X is severe, > X is mild, else on time.
    """
    if machine.status == STATUS_PAUSED:
        return TIER_PAUSED
    if machine.status != STATUS_RUNNING:
        return TIER_NEUTRAL

    elapsed = minutes_since(machine.started_at, now)
    target = machine.cycle_target_minutes
    if target is None:
        target = DEFAULT_CYCLE_TARGET_MINUTES

    if elapsed > 2 * target:
        return TIER_SEVERE_DELAY
    if elapsed > target:
        return TIER_MILD_DELAY
    return TIER_ON_TIME


def is_active_record(record: Optional[Dict[str, Any]]) -> bool:
    """True for records with a machine assigned and an in-progress or paused state."""
    if not record:
        return False
    if not nested(record, "maquina", "nombre"):
        return False
    state = record.get("estado")
    return isinstance(state, str) and state.lower() in ACTIVE_STATES


def snapshot_from_record(
    record: Dict[str, Any],
    default_target: float = DEFAULT_CYCLE_TARGET_MINUTES
) -> MachineSnapshot:
    """Build a MachineSnapshot from one live operation-process record."""
    target = to_float(record.get("tiempoEstimado"))
    return MachineSnapshot(
        id=str(record.get("id", "")),
        name=nested(record, "maquina", "nombre"),
        status=classify(record.get("estado")),
        piece=nested(record, "proceso", "nombre") or None,
        operator=nested(record, "usuario", "nombre") or None,
        started_at=parse_timestamp(record.get("horaInicio")),
        cycle_target_minutes=target if target is not None else default_target,
        operation=nested(record, "operacion", "operacion") or NO_OPERATION,
    )


def build_machine_board(
    records: Optional[Iterable[Dict[str, Any]]],
    default_target: float = DEFAULT_CYCLE_TARGET_MINUTES
) -> List[MachineSnapshot]:
    """
    Turn the live operation-process feed into the visible machine set.

    Records without a machine or outside in_progress/paused are dropped
    silently: they represent machines that are not currently tracked.

    Args:
        records: Raw `procesosOperacion` payload items
        default_target: Cycle target for records without an estimate

    Returns:
        MachineSnapshot list in feed order
    """
    if not records:
        return []

    records = list(records)
    machines = [snapshot_from_record(r, default_target) for r in records if is_active_record(r)]
    logger.info(f"Machine board: {len(machines)} active of {len(records)} process records")
    return machines


def board_stats(machines: Iterable[MachineSnapshot]) -> Dict[str, int]:
    """Count running and paused machines for the summary widgets."""
    machines = list(machines)
    return {
        'working': sum(1 for m in machines if m.status == STATUS_RUNNING),
        'paused': sum(1 for m in machines if m.status == STATUS_PAUSED),
    }


def filter_machines(
    machines: Iterable[MachineSnapshot],
    term: str = "",
    status: str = STATUS_FILTER_ALL
) -> List[MachineSnapshot]:
    """
    Filter machines by search term and status.

    Args:
        machines: Machine snapshots
        term: Case-insensitive substring matched against machine, piece and operator
        status: 'all', or a status category such as 'running' or 'paused'

    Returns:
        Matching machines in their original order
    """
    term = (term or "").strip().lower()
    result = []
    for machine in machines:
        if status and status != STATUS_FILTER_ALL and machine.status != status:
            continue
        if term:
            haystack = [machine.name or "", machine.piece or "", machine.operator or ""]
            if not any(term in text.lower() for text in haystack):
                continue
        result.append(machine)
    return result
