from core.calculations.progress import (
    BAND_BEHIND,
    BAND_COMPLETE,
    BAND_ON_TRACK,
    aggregate_progress,
    completion_band,
    has_bottleneck,
    progress_to_dataframe,
    step_breakdown_to_dataframe,
)
from core.models import Operation


def test_single_operation_with_lagging_step(make_operation):
    projects = aggregate_progress([
        make_operation(quantity=10, steps=[("Corte", 10), ("CNC", 3)])
    ])
    assert len(projects) == 1
    project = projects[0]
    assert project.target_units == 20
    assert project.actual_units == 13
    assert project.completion_percent == 65
    assert project.has_bottleneck is True


def test_completion_is_clamped(make_operation):
    project = aggregate_progress([
        make_operation(quantity=10, steps=[("Corte", 12), ("CNC", 12)])
    ])[0]
    assert project.completion_percent == 100


def test_project_without_target_is_zero_percent(make_operation):
    project = aggregate_progress([make_operation(quantity=10, steps=[])])[0]
    assert project.target_units == 0
    assert project.completion_percent == 0


def _operation(make_operation, quantity, counts):
    steps = [(f"step-{i}", count) for i, count in enumerate(counts)]
    return Operation.from_payload(make_operation(quantity=quantity, steps=steps))


def test_bottleneck_threshold_is_strict(make_operation):
    assert has_bottleneck(_operation(make_operation, 10, [5])) is False
    assert has_bottleneck(_operation(make_operation, 10, [4])) is True


def test_bottleneck_compares_with_previous_step(make_operation):
    assert has_bottleneck(_operation(make_operation, 10, [10, 10, 4])) is True
    assert has_bottleneck(_operation(make_operation, 10, [10, 6, 1])) is False


def test_operations_grouped_by_project_in_first_seen_order(make_operation):
    projects = aggregate_progress([
        make_operation(project_id="2", project="Beta", quantity=4, steps=[("Corte", 4)], name="OP-B"),
        make_operation(project_id="1", project="Alpha", quantity=10,
                       steps=[("Corte", 10), ("CNC", 3)], name="OP-A1"),
        make_operation(project_id="1", project="Alpha", quantity=5, steps=[("Corte", 5)], name="OP-A2"),
    ])
    assert [p.project_name for p in projects] == ["Beta", "Alpha"]

    alpha = projects[1]
    assert alpha.target_units == 25
    assert alpha.actual_units == 18
    assert alpha.completion_percent == 72
    assert alpha.has_bottleneck is True
    assert alpha.steps["Corte"].actual == 15
    assert alpha.steps["Corte"].target == 15
    assert alpha.steps["CNC"].actual == 3
    assert alpha.steps["CNC"].target == 10
    assert alpha.steps["CNC"].percent == 30

    assert projects[0].has_bottleneck is False


def test_operations_without_project_are_skipped(make_operation):
    projects = aggregate_progress([
        make_operation(project_id=None, steps=[("Corte", 1)]),
        make_operation(project_id="1", steps=[("Corte", 10)]),
    ])
    assert [p.project_id for p in projects] == ["1"]


def test_null_quantities_and_counts_become_zero(make_operation):
    project = aggregate_progress([
        make_operation(quantity=None, steps=[("Corte", None), ("CNC", 2)])
    ])[0]
    assert project.target_units == 0
    assert project.actual_units == 2


def test_empty_input():
    assert aggregate_progress(None) == []
    assert aggregate_progress([]) == []


def test_completion_band():
    assert completion_band(100) == BAND_COMPLETE
    assert completion_band(50) == BAND_ON_TRACK
    assert completion_band(49) == BAND_BEHIND


def test_dataframes(make_operation):
    projects = aggregate_progress([
        make_operation(quantity=10, steps=[("Corte", 10), ("CNC", 3)])
    ])
    df = progress_to_dataframe(projects)
    assert list(df['completion_percent']) == [65]
    assert list(df['band']) == [BAND_ON_TRACK]

    steps = step_breakdown_to_dataframe(projects[0])
    assert list(steps['step']) == ["Corte", "CNC"]
    assert list(steps['percent']) == [100, 30]

    assert progress_to_dataframe([]).empty
