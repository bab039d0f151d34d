from datetime import timedelta

import pytest

from core.calculations.machines import (
    TIER_MILD_DELAY,
    TIER_NEUTRAL,
    TIER_ON_TIME,
    TIER_PAUSED,
    TIER_SEVERE_DELAY,
    bar_percent,
    board_stats,
    build_machine_board,
    classify,
    color_tier,
    filter_machines,
)
from core.models import (
    STATUS_IDLE,
    STATUS_MAINTENANCE,
    STATUS_PAUSED,
    STATUS_RUNNING,
    MachineSnapshot,
)


@pytest.mark.parametrize("raw, expected", [
    ("paused", STATUS_PAUSED),
    ("PAUSED", STATUS_PAUSED),
    ("in_progress", STATUS_RUNNING),
    ("In_Progress", STATUS_RUNNING),
    ("archived", STATUS_IDLE),
    ("", STATUS_IDLE),
    (None, STATUS_IDLE),
])
def test_classify(raw, expected):
    assert classify(raw) == expected


def _machine(now, status=STATUS_RUNNING, elapsed=0, target=30):
    return MachineSnapshot(
        id="1",
        name="CNC-1",
        status=status,
        started_at=now - timedelta(minutes=elapsed),
        cycle_target_minutes=target,
    )


@pytest.mark.parametrize("elapsed, expected", [
    (10, TIER_ON_TIME),
    (30, TIER_ON_TIME),
    (45, TIER_MILD_DELAY),
    (60, TIER_MILD_DELAY),
    (61, TIER_SEVERE_DELAY),
])
def test_running_machine_tiers(now, elapsed, expected):
    assert color_tier(_machine(now, elapsed=elapsed, target=30), now) == expected


def test_paused_wins_over_elapsed_time(now):
    machine = _machine(now, status=STATUS_PAUSED, elapsed=500, target=10)
    assert color_tier(machine, now) == TIER_PAUSED


def test_idle_and_maintenance_are_neutral(now):
    assert color_tier(_machine(now, status=STATUS_IDLE, elapsed=500), now) == TIER_NEUTRAL
    assert color_tier(_machine(now, status=STATUS_MAINTENANCE, elapsed=500), now) == TIER_NEUTRAL


def test_running_without_start_is_on_time(now):
    machine = MachineSnapshot(id="1", name="CNC-1", status=STATUS_RUNNING, started_at=None)
    assert color_tier(machine, now) == TIER_ON_TIME


def test_bar_percent():
    assert bar_percent(15, 30) == 50
    assert bar_percent(45, 30) == 100
    assert bar_percent(5, 0) == 0


def test_board_keeps_only_active_records_with_a_machine(make_process_record):
    records = [
        make_process_record(record_id="1", state="in_progress", machine="CNC-1"),
        make_process_record(record_id="2", state="paused", machine="Torno-2"),
        make_process_record(record_id="3", state="finished", machine="Prensa"),
        make_process_record(record_id="4", state="in_progress", machine=None),
        make_process_record(record_id="5", state="In_Progress", machine="Laser"),
        None,
    ]
    board = build_machine_board(records)
    assert [m.id for m in board] == ["1", "2", "5"]
    assert [m.status for m in board] == [STATUS_RUNNING, STATUS_PAUSED, STATUS_RUNNING]


def test_board_defaults(make_process_record):
    record = make_process_record(estimate=None, operation=None, piece=None, operator=None)
    machine = build_machine_board([record])[0]
    assert machine.cycle_target_minutes == 30
    assert machine.operation == "S/N"
    assert machine.piece is None
    assert machine.operator is None


def test_board_default_target_is_configurable(make_process_record):
    machine = build_machine_board([make_process_record(estimate=None)], default_target=12)[0]
    assert machine.cycle_target_minutes == 12


def test_board_keeps_explicit_zero_target(make_process_record):
    machine = build_machine_board([make_process_record(estimate=0)])[0]
    assert machine.cycle_target_minutes == 0


def test_board_from_payload_end_to_end(make_process_record, now):
    record = make_process_record(started_minutes_ago=45, estimate=30)
    machine = build_machine_board([record])[0]
    assert machine.name == "CNC-1"
    assert machine.operator == "Ana"
    assert color_tier(machine, now) == TIER_MILD_DELAY


def test_empty_board():
    assert build_machine_board(None) == []
    assert build_machine_board([]) == []


def test_board_stats(now):
    machines = [
        _machine(now, status=STATUS_RUNNING),
        _machine(now, status=STATUS_RUNNING),
        _machine(now, status=STATUS_PAUSED),
    ]
    assert board_stats(machines) == {'working': 2, 'paused': 1}


def test_filter_machines(make_process_record):
    board = build_machine_board([
        make_process_record(record_id="1", machine="CNC-1", operator="Ana"),
        make_process_record(record_id="2", state="paused", machine="Torno-2", operator="Luis"),
        make_process_record(record_id="3", machine="Laser", operator="Marta", piece="Corte placa"),
    ])
    assert [m.id for m in filter_machines(board, "ana")] == ["1"]
    assert [m.id for m in filter_machines(board, "PLACA")] == ["3"]
    assert [m.id for m in filter_machines(board, "", STATUS_PAUSED)] == ["2"]
    assert [m.id for m in filter_machines(board, "cnc", STATUS_PAUSED)] == []
    assert len(filter_machines(board)) == 3
