import pytest

from whaleshrink.services.shrink import step_planner


@pytest.mark.unit
def test_plan_without_step_size_is_single_step() -> None:
    assert step_planner.plan(1000, 200) == [200]


@pytest.mark.unit
def test_plan_with_reduction_within_step_is_single_step() -> None:
    assert step_planner.plan(1000, 200, 800) == [200]
    assert step_planner.plan(1000, 200, 5000) == [200]


@pytest.mark.unit
def test_plan_splits_reduction_into_bounded_steps() -> None:
    assert step_planner.plan(1000, 200, 300) == [700, 400, 200]


@pytest.mark.unit
def test_plan_returns_empty_when_nothing_to_reclaim() -> None:
    assert step_planner.plan(200, 200, 100) == []
    assert step_planner.plan(150, 200) == []


@pytest.mark.unit
def test_plan_with_fractional_start_never_exceeds_step() -> None:
    steps = step_planner.plan(1000.4, 200, 300)

    assert steps == [701, 401, 200]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("start", "desired", "step"),
    [
        (1000, 200, 300),
        (1000, 200, 1),
        (1000, 999, 1),
        (50000, 1234, 4096),
        (777.75, 10, 33),
    ],
)
def test_plan_properties(start: float, desired: int, step: int) -> None:
    steps = step_planner.plan(start, desired, step)

    assert steps[-1] == desired
    assert all(earlier > later for earlier, later in zip(steps, steps[1:], strict=False))
    assert all(target >= desired for target in steps)
    previous = start
    for target in steps:
        assert previous - target <= step
        previous = target
