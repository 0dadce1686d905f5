"""
Scale Converter — Elo-style rating ↔ Glicko-2 internal scale

  mu  = (rating - anchor_rating) / factor
  phi = deviation / factor

Internally all strength calculations use the Glicko-2 scaled values.
"""
from dataclasses import dataclass

from src.glicko.exceptions import ConfigurationError
from src.glicko.glicko_config import DEFAULT_DEVIATION, DEFAULT_FACTOR, DEFAULT_RATING
from src.glicko.glicko_types import Outcome, Strength


@dataclass(frozen=True)
class ScaleConverter:
    """Conversions between the human rating scale and the Glicko-2 scale."""
    rating: float = DEFAULT_RATING
    deviation: float = DEFAULT_DEVIATION
    factor: float = DEFAULT_FACTOR

    def __post_init__(self):
        if self.factor <= 0:
            raise ConfigurationError(f"Scale factor must be positive, got {self.factor}")

    def rating_to_mu(self, rating: float) -> float:
        return (rating - self.rating) / self.factor

    def deviation_to_phi(self, deviation: float) -> float:
        return deviation / self.factor

    def mu_to_rating(self, mu: float) -> float:
        return mu * self.factor + self.rating

    def phi_to_deviation(self, phi: float) -> float:
        return phi * self.factor

    def to_strength(self, rating: float, deviation: float, volatility: float) -> Strength:
        """Build an internal-scale Strength from human-scale values."""
        return Strength(
            mu=self.rating_to_mu(rating),
            phi=self.deviation_to_phi(deviation),
            sigma=volatility,
        )

    def to_outcome(self, opponent_rating: float, opponent_deviation: float,
                   score: float) -> Outcome:
        return Outcome(
            opponent_mu=self.rating_to_mu(opponent_rating),
            opponent_phi=self.deviation_to_phi(opponent_deviation),
            score=score,
        )

    def unrated(self, volatility: float) -> Strength:
        """Strength of a player with no rated matches."""
        return self.to_strength(self.rating, self.deviation, volatility)
