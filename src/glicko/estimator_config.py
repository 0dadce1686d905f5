"""Glicko-2 Config Loader (YAML)."""
from pathlib import Path
from typing import Any

import yaml

from src.glicko.estimator import StrengthEstimator
from src.glicko.exceptions import ConfigurationError
from src.glicko.glicko_config import (
    DEFAULT_DEVIATION,
    DEFAULT_DURATION,
    DEFAULT_EPSILON,
    DEFAULT_FACTOR,
    DEFAULT_RATING,
    DEFAULT_TAU,
    DEFAULT_VOLATILITY,
    MAX_BRACKET_ITERATIONS,
    MAX_DEVIATION,
    MAX_RATING,
    MAX_SOLVER_ITERATIONS,
    MAX_VOLATILITY,
    MIN_DEVIATION,
    MIN_RATING,
    MIN_VOLATILITY,
)
from src.glicko.glicko_types import Bounds, Strength
from src.glicko.scale import ScaleConverter


class GlickoConfig:
    """YAML-based Glicko-2 configuration.

    Bounds are written on the human rating scale and converted to the
    Glicko-2 scale with the configured ScaleConverter.
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "glicko_config.yaml"

    def __init__(self, config_path: Path | str | None = None):
        path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        with open(path, encoding="utf-8") as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Malformed config {path}: {e}") from e
        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"Config {path} must be a mapping, got {type(config).__name__}")
        self._config = config
        self._build()

    def _section(self, name: str) -> dict[str, Any]:
        section = self._config.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Config section '{name}' must be a mapping")
        return section

    def _number(self, section: str, key: str, default: float) -> float:
        value = self._section(section).get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{section}.{key} must be a number, got {value!r}") from e

    def _range(self, name: str, default_min: float, default_max: float) -> tuple[float, float]:
        limits = self._section("bounds").get(name) or {}
        if not isinstance(limits, dict):
            raise ConfigurationError(f"bounds.{name} must be a mapping with min/max")
        try:
            return float(limits.get("min", default_min)), float(limits.get("max", default_max))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"bounds.{name} min/max must be numbers") from e

    def _build(self) -> None:
        self._scale = ScaleConverter(
            rating=self._number("scale", "rating", DEFAULT_RATING),
            deviation=self._number("scale", "deviation", DEFAULT_DEVIATION),
            factor=self._number("scale", "factor", DEFAULT_FACTOR),
        )

        min_rating, max_rating = self._range("rating", MIN_RATING, MAX_RATING)
        min_dev, max_dev = self._range("deviation", MIN_DEVIATION, MAX_DEVIATION)
        min_vol, max_vol = self._range("volatility", MIN_VOLATILITY, MAX_VOLATILITY)
        self._bounds = Bounds(
            min_mu=self._scale.rating_to_mu(min_rating),
            max_mu=self._scale.rating_to_mu(max_rating),
            min_phi=self._scale.deviation_to_phi(min_dev),
            max_phi=self._scale.deviation_to_phi(max_dev),
            min_sigma=min_vol,
            max_sigma=max_vol,
        )

        if self.tau <= 0:
            raise ConfigurationError(f"system.tau must be positive, got {self.tau}")
        if self.epsilon <= 0:
            raise ConfigurationError(f"system.epsilon must be positive, got {self.epsilon}")
        if self.period_duration <= 0:
            raise ConfigurationError(
                f"system.period_duration must be positive, got {self.period_duration}"
            )

    @property
    def version(self) -> str:
        return str(self._config.get("version", ""))

    @property
    def scale(self) -> ScaleConverter:
        return self._scale

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def tau(self) -> float:
        return self._number("system", "tau", DEFAULT_TAU)

    @property
    def epsilon(self) -> float:
        return self._number("system", "epsilon", DEFAULT_EPSILON)

    @property
    def default_volatility(self) -> float:
        return self._number("system", "default_volatility", DEFAULT_VOLATILITY)

    @property
    def period_duration(self) -> float:
        return self._number("system", "period_duration", DEFAULT_DURATION)

    @property
    def max_bracket_iterations(self) -> int:
        return int(self._number("solver", "max_bracket_iterations", MAX_BRACKET_ITERATIONS))

    @property
    def max_solver_iterations(self) -> int:
        return int(self._number("solver", "max_solver_iterations", MAX_SOLVER_ITERATIONS))

    def build_estimator(self) -> StrengthEstimator:
        return StrengthEstimator(
            bounds=self.bounds,
            tau=self.tau,
            epsilon=self.epsilon,
            max_bracket_iterations=self.max_bracket_iterations,
            max_solver_iterations=self.max_solver_iterations,
        )

    def new_strength(self) -> Strength:
        """Initial strength of an unrated player."""
        return self._scale.unrated(self.default_volatility)
