"""Glicko-2 Types.

All values are on the internal Glicko-2 scale (see ScaleConverter):
  mu    — strength estimate
  phi   — rating deviation (one standard deviation of the estimate)
  sigma — volatility
"""
from dataclasses import dataclass

from src.glicko.exceptions import ConfigurationError


@dataclass
class Strength:
    """Player strength estimate, updated in place by StrengthEstimator."""
    mu: float
    phi: float
    sigma: float


@dataclass(frozen=True)
class Outcome:
    """Single match result against an opponent.

    score: 0 for a loss, 0.5 for a draw, 1 for a win (any value in [0, 1]
    is accepted as a fractional result).
    """
    opponent_mu: float
    opponent_phi: float
    score: float


@dataclass(frozen=True)
class Evidence:
    """Outcome weighted against the acting player's mu.

    g: opponent reliability weight, e: expected score. Built by ``weigh``;
    stays valid only for the mu it was computed with.
    """
    g: float
    e: float
    score: float


@dataclass(frozen=True)
class Bounds:
    """Inclusive [min, max] saturation range for each strength component."""
    min_mu: float
    max_mu: float
    min_phi: float
    max_phi: float
    min_sigma: float
    max_sigma: float

    def __post_init__(self):
        for name in ("mu", "phi", "sigma"):
            lo = getattr(self, f"min_{name}")
            hi = getattr(self, f"max_{name}")
            if lo > hi:
                raise ConfigurationError(f"min_{name}={lo} exceeds max_{name}={hi}")

    def contains(self, strength: Strength) -> bool:
        return (self.min_mu <= strength.mu <= self.max_mu
                and self.min_phi <= strength.phi <= self.max_phi
                and self.min_sigma <= strength.sigma <= self.max_sigma)
