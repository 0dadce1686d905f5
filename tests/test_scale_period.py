"""ScaleConverter + rating period 테스트."""
from datetime import datetime, timedelta

import pandas as pd
import pytest

from src.glicko.exceptions import ConfigurationError
from src.glicko.glicko_config import DEFAULT_DURATION, DEFAULT_FACTOR, DEFAULT_RATING
from src.glicko.period import elapsed_fraction
from src.glicko.scale import ScaleConverter


# === ScaleConverter ===

def test_anchor_rating_is_zero_mu():
    assert ScaleConverter().rating_to_mu(DEFAULT_RATING) == 0.0


def test_paper_conversions():
    """Glickman's paper: rating 1400 → mu -0.5756, RD 30 → phi 0.1727."""
    c = ScaleConverter()
    assert c.rating_to_mu(1400) == pytest.approx(-0.5756, abs=1e-4)
    assert c.deviation_to_phi(30) == pytest.approx(0.1727, abs=1e-4)


def test_inverse_conversions():
    c = ScaleConverter()
    assert c.mu_to_rating(c.rating_to_mu(1873.25)) == pytest.approx(1873.25)
    assert c.phi_to_deviation(c.deviation_to_phi(87.5)) == pytest.approx(87.5)


def test_custom_anchor():
    c = ScaleConverter(rating=1200, deviation=300, factor=100)
    assert c.rating_to_mu(1300) == 1.0
    assert c.unrated(0.05).phi == 3.0
    assert c.unrated(0.05).sigma == 0.05


def test_to_outcome():
    c = ScaleConverter()
    o = c.to_outcome(1550, 100, 0)
    assert o.opponent_mu == pytest.approx(50 / DEFAULT_FACTOR)
    assert o.opponent_phi == pytest.approx(100 / DEFAULT_FACTOR)
    assert o.score == 0


def test_non_positive_factor_rejected():
    with pytest.raises(ConfigurationError):
        ScaleConverter(factor=0)


# === elapsed_fraction ===

def test_first_match_has_no_elapsed_time():
    assert elapsed_fraction(None, datetime(2026, 1, 1)) == 0.0


def test_one_full_period():
    start = datetime(2026, 1, 1)
    assert elapsed_fraction(start, start + timedelta(seconds=DEFAULT_DURATION)) == pytest.approx(1.0)


def test_fractional_period():
    start = datetime(2026, 1, 1)
    assert elapsed_fraction(start, start + timedelta(hours=12), duration=86400) == pytest.approx(0.5)


def test_clock_not_advancing():
    t = datetime(2026, 1, 1, 12)
    assert elapsed_fraction(t, t) == 0.0
    assert elapsed_fraction(t, t - timedelta(days=1)) == 0.0


def test_pandas_timestamps():
    start = pd.Timestamp('2026-03-01')
    assert elapsed_fraction(start, pd.Timestamp('2026-03-15'), duration=DEFAULT_DURATION) == pytest.approx(2.0)


def test_non_positive_duration_rejected():
    with pytest.raises(ConfigurationError):
        elapsed_fraction(datetime(2026, 1, 1), datetime(2026, 1, 2), duration=0)
