from __future__ import annotations

import random

from pytest import approx

from mindfield.config import EssenceConfig
from mindfield.sim.core.essence import EssenceIndex


def test_positive_signal_raises_essence():
    essence = EssenceIndex.from_config(EssenceConfig())

    assert essence.update([1.0]) == approx(6.0)
    assert essence.extremity() == approx(1.0)


def test_no_signals_relaxes_toward_baseline():
    essence = EssenceIndex(value=9.0)

    assert essence.update([]) == approx(8.6)


def test_large_signals_are_clamped_to_upper_bound():
    essence = EssenceIndex(value=8.0)

    assert essence.update([10.0, 0.0]) == 10.0


def test_large_negative_signals_are_clamped_to_lower_bound():
    essence = EssenceIndex(value=1.0)

    assert essence.update([-50.0]) == 0.0


def test_essence_stays_bounded_under_random_signals():
    rng = random.Random(7)
    essence = EssenceIndex(value=5.0, experience_scale=3.0)
    for _ in range(500):
        signals = [rng.uniform(-20.0, 20.0) for _ in range(rng.randrange(0, 6))]
        value = essence.update(signals)
        assert 0.0 <= value <= 10.0


def test_influence_factor_grows_with_distance_from_baseline():
    assert EssenceIndex(value=5.0).influence_factor() == 0.0
    assert EssenceIndex(value=7.0).influence_factor() == approx(4.0)
    assert EssenceIndex(value=2.0).influence_factor() == approx(6.0)
