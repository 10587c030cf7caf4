"""Tests for termination strategies."""

import pytest

from diffevo.core.individual import Individual
from diffevo.errors import ConfigurationError
from diffevo.strategies.termination import (
    AnyTermination,
    MaxGenerationTermination,
    PlateauTermination,
    TimeBudgetTermination,
)


def _best(cost):
    return Individual([0.0], cost=cost, valid=True)


def test_max_generation_stops_at_limit():
    policy = MaxGenerationTermination(3)
    assert [policy.should_stop(g, _best(0.0)) for g in range(5)] == [False, False, False, True, True]


def test_max_generation_zero_stops_immediately():
    assert MaxGenerationTermination(0).should_stop(0, _best(1.0))


def test_max_generation_negative_rejected():
    with pytest.raises(ConfigurationError):
        MaxGenerationTermination(-1)


def test_plateau_stops_after_patience_without_improvement():
    policy = PlateauTermination(patience=2, epsilon=0.1)
    costs = [10.0, 5.0, 4.95, 4.93]
    decisions = [policy.should_stop(g, _best(c)) for g, c in enumerate(costs)]
    assert decisions == [False, False, False, True]


def test_plateau_resets_on_improvement():
    policy = PlateauTermination(patience=2)
    costs = [3.0, 3.0, 2.0, 2.0, 2.0]
    decisions = [policy.should_stop(g, _best(c)) for g, c in enumerate(costs)]
    assert decisions == [False, False, False, False, True]


def test_plateau_maximize_direction():
    policy = PlateauTermination(patience=1, minimize=False)
    assert not policy.should_stop(0, _best(1.0))
    assert not policy.should_stop(1, _best(2.0))
    assert policy.should_stop(2, _best(1.5))


def test_time_budget_with_fake_clock():
    ticks = iter([0.0, 1.0, 2.5, 3.0])
    policy = TimeBudgetTermination(2.5, clock=lambda: next(ticks))
    assert [policy.should_stop(g, _best(0.0)) for g in range(4)] == [False, False, True, True]


def test_time_budget_must_be_positive():
    with pytest.raises(ConfigurationError):
        TimeBudgetTermination(0)


def test_any_termination_consults_every_member():
    plateau = PlateauTermination(patience=1)
    policy = AnyTermination(MaxGenerationTermination(1), plateau)
    assert not policy.should_stop(0, _best(5.0))
    assert policy.should_stop(1, _best(4.0))
    # The plateau policy saw both checks even though the first member stopped.
    assert plateau._reference == 4.0


def test_any_termination_requires_members():
    with pytest.raises(ConfigurationError):
        AnyTermination()


def test_plateau_reset_forgets_previous_run():
    policy = PlateauTermination(patience=1)
    policy.should_stop(0, _best(1.0))
    assert policy.should_stop(1, _best(1.0))

    policy.reset()
    assert not policy.should_stop(0, _best(1.0))


def test_time_budget_reset_restarts_clock():
    ticks = iter([0.0, 5.0, 10.0, 11.0])
    policy = TimeBudgetTermination(2.0, clock=lambda: next(ticks))
    policy.should_stop(0, _best(0.0))
    assert policy.should_stop(1, _best(0.0))

    policy.reset()
    assert not policy.should_stop(0, _best(0.0))
    assert not policy.should_stop(1, _best(0.0))


def test_any_termination_resets_members():
    plateau = PlateauTermination(patience=2)
    policy = AnyTermination(MaxGenerationTermination(100), plateau)
    for generation in range(3):
        policy.should_stop(generation, _best(1.0))
    assert plateau._stalled == 2

    policy.reset()
    assert plateau._reference is None
    assert plateau._stalled == 0
