"""
Dashboard Data Models

Typed containers for the records returned by the tracking API and for the
structures derived from them. Every `from_payload` constructor applies the
defaulting rules for optional fields so that the calculation modules never
deal with raw nulls.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.calculations.durations import parse_timestamp, percent_of_target

logger = logging.getLogger(__name__)

# Machine status categories
STATUS_RUNNING = "running"
STATUS_IDLE = "idle"
STATUS_PAUSED = "paused"
STATUS_MAINTENANCE = "maintenance"

# Raw process states reported by the API
STATE_IN_PROGRESS = "in_progress"
STATE_PAUSED = "paused"

DEFAULT_CYCLE_TARGET_MINUTES = 30.0
NOT_AVAILABLE = "N/A"
NO_OPERATION = "S/N"


def nested(payload: Optional[Dict[str, Any]], *keys: str) -> Any:
    """Walk nested dictionaries, returning None as soon as a level is missing."""
    current: Any = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def to_float(value: Any) -> Optional[float]:
    """Convert a numeric API field to float, None if missing or invalid."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric value ignored: {value!r}")
        return None


def to_int(value: Any, default: int = 0) -> int:
    """Convert a count field to int, falling back to default."""
    number = to_float(value)
    return int(number) if number is not None else default


@dataclass
class Operator:
    """A person to whom process assignments are scheduled."""
    id: str
    code: str
    name: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Operator":
        code = payload.get("numero")
        return cls(
            id=str(payload.get("id", "")),
            code=str(code).strip() if code is not None else "",
            name=payload.get("nombre") or "",
        )


@dataclass
class ProcessAssignment:
    """
    One unit of work assigned to an operator on a given date.

    A missing start means the process has not started yet; a missing end
    means it is still running.
    """
    process_name: str
    operation_name: Optional[str] = None
    project_name: Optional[str] = None
    machine_name: Optional[str] = None
    estimated_minutes: Optional[float] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    actual_minutes: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ProcessAssignment":
        return cls(
            process_name=nested(payload, "proceso", "nombre") or "",
            operation_name=nested(payload, "operacion", "operacion"),
            project_name=nested(payload, "operacion", "proyecto", "proyecto"),
            machine_name=nested(payload, "maquina", "nombre"),
            estimated_minutes=to_float(payload.get("tiempoEstimado")),
            started_at=parse_timestamp(payload.get("horaInicio")),
            ended_at=parse_timestamp(payload.get("horaFin")),
            actual_minutes=to_float(payload.get("tiempoRealCalculado")),
        )


@dataclass
class OperatorDay:
    """An operator's assignments for one reporting day."""
    operator_id: str
    name: str
    assignments: List[ProcessAssignment] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "OperatorDay":
        return cls(
            operator_id=str(payload.get("id", "")),
            name=payload.get("nombre") or "",
            assignments=[
                ProcessAssignment.from_payload(p)
                for p in payload.get("procesosAsignados") or []
                if p
            ],
        )


@dataclass
class Interval:
    """A block of recorded work on an operator's timeline."""
    start: datetime
    end: datetime
    minutes: int
    kind: str = "work"  # 'work', 'break' or 'unknown'
    machine_name: str = NOT_AVAILABLE
    operation: str = NOT_AVAILABLE
    project: str = NOT_AVAILABLE
    estimated_minutes: float = 0.0
    in_progress: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'start': self.start,
            'end': self.end,
            'minutes': self.minutes,
            'kind': self.kind,
            'machine': self.machine_name,
            'operation': self.operation,
            'project': self.project,
            'estimated_minutes': self.estimated_minutes,
            'in_progress': self.in_progress,
        }


@dataclass
class TimelineResult:
    """Sorted work intervals plus the total of their rounded durations."""
    intervals: List[Interval] = field(default_factory=list)
    total_work_minutes: int = 0

    @property
    def total_work_hours(self) -> float:
        return self.total_work_minutes / 60.0


@dataclass
class MachineSnapshot:
    """Current state of a machine with an active or paused process."""
    id: str
    name: str
    status: str
    piece: Optional[str] = None
    operator: Optional[str] = None
    started_at: Optional[datetime] = None
    cycle_target_minutes: float = DEFAULT_CYCLE_TARGET_MINUTES
    operation: str = NO_OPERATION


@dataclass
class ProcessStep:
    """One ordered step of an operation with its running piece count."""
    name: str
    current_count: int = 0
    state: Optional[str] = None
    started_at: Optional[datetime] = None
    estimated_minutes: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ProcessStep":
        return cls(
            name=nested(payload, "proceso", "nombre") or NOT_AVAILABLE,
            current_count=to_int(payload.get("conteoActual")),
            state=payload.get("estado"),
            started_at=parse_timestamp(payload.get("horaInicio")),
            estimated_minutes=to_float(payload.get("tiempoEstimado")),
        )


@dataclass
class Operation:
    """A batch of process steps under a project, tied to a work-order quantity."""
    name: str
    project_id: Optional[str]
    project_name: str
    order_quantity: int = 0
    steps: List[ProcessStep] = field(default_factory=list)
    id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Operation":
        project_id = nested(payload, "proyecto", "id")
        return cls(
            id=str(payload["id"]) if payload.get("id") is not None else None,
            name=payload.get("operacion") or NO_OPERATION,
            project_id=str(project_id) if project_id is not None else None,
            project_name=nested(payload, "proyecto", "proyecto") or NOT_AVAILABLE,
            order_quantity=to_int(nested(payload, "workorder", "cantidad")),
            steps=[ProcessStep.from_payload(p) for p in payload.get("procesos") or [] if p],
        )


@dataclass
class StepProgress:
    """Accumulated actual and target units for one step name."""
    actual: int = 0
    target: int = 0

    @property
    def percent(self) -> int:
        return percent_of_target(self.actual, self.target)


@dataclass
class ProjectProgress:
    """Completion state of one project across all its operations."""
    project_id: str
    project_name: str
    target_units: int = 0
    actual_units: int = 0
    has_bottleneck: bool = False
    steps: Dict[str, StepProgress] = field(default_factory=dict)

    @property
    def completion_percent(self) -> int:
        return percent_of_target(self.actual_units, self.target_units)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'project_id': self.project_id,
            'project': self.project_name,
            'target_units': self.target_units,
            'actual_units': self.actual_units,
            'completion_percent': self.completion_percent,
            'has_bottleneck': self.has_bottleneck,
        }
