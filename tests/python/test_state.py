from __future__ import annotations

from pytest import approx

from mindfield.config import StateConfig
from mindfield.sim.core.state import TRAIT_COUNT, StateVector


def test_new_state_is_zeroed_to_configured_sizes():
    state = StateVector(StateConfig(memory_dim=8, context_dim=3))

    assert state.memory == [0.0] * 8
    assert state.context == [0.0] * 3
    assert len(state.traits) == TRAIT_COUNT
    assert state.norm() == 0.0


def test_update_blends_attention_and_recalled_memory():
    state = StateVector(StateConfig(memory_dim=4, context_dim=2))
    state.update([1.0, 2.0], [1.0])

    assert state.memory == approx([0.8, 1.0, 0.0, 0.0])
    assert state.context == approx([0.4, 0.5])

    state.update([], [])

    assert state.memory == approx([0.76, 0.95, 0.0, 0.0])
    assert state.context == approx([0.58, 0.725])


def test_extra_inputs_are_ignored():
    state = StateVector(StateConfig(memory_dim=2, context_dim=2))
    state.update([1.0, 1.0, 1.0, 1.0], [0.0, 0.0, 5.0])

    assert len(state.memory) == 2
    assert state.memory == approx([0.5, 0.5])


def test_norm_and_dot():
    config = StateConfig(memory_dim=2, context_dim=1)
    a = StateVector(config, memory=[3.0, 4.0])
    b = StateVector(config, memory=[1.0, 2.0])

    assert a.norm() == approx(5.0)
    assert a.dot(b) == approx(11.0)
