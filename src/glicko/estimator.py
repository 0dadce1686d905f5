"""
Glicko-2 Strength Estimator

Online (per-match) Glicko-2 update of a player's Strength.
Rating periods are not batching boundaries: every update carries the
fraction of a nominal period that elapsed since the player's last update.

Core formulas (Glicko-2 scale):
  g      = 1 / sqrt(1 + 3·phi_opp² / π²)
  e      = 1 / (1 + exp(-g·(mu - mu_opp)))
  v      = 1 / Σ g²·e·(1 - e)
  delta  = v · Σ g·(score - e)
  sigma' = exp(A / 2),  A = root of f(x) (Illinois secant)
  phi*   = sqrt(phi² + sigma'²·elapsed_fraction)
  phi'   = 1 / sqrt(1/phi*² + 1/v)
  mu'    = mu + phi'²·(delta / v)

Then mu', phi', sigma' are clamped to the configured Bounds.

Two call shapes share the same core:
  - estimate():       one outcome per update (sequential mode)
  - estimate_batch(): all outcomes weighted with the same pre-update mu

Acknowledgements:
  - https://www.glicko.net/glicko/glicko2.pdf
  - https://blog.hypersect.com/the-online-skill-ranking-of-inversus-deluxe/
"""

import logging
import math
from typing import Iterable, Sequence

import numpy as np

from src.glicko.exceptions import ConfigurationError, ConvergenceError
from src.glicko.glicko_config import (
    DEFAULT_EPSILON,
    DEFAULT_TAU,
    MAX_BRACKET_ITERATIONS,
    MAX_SOLVER_ITERATIONS,
    MIN_EVIDENCE_INFORMATION,
)
from src.glicko.glicko_types import Bounds, Evidence, Outcome, Strength

logger = logging.getLogger(__name__)


def weighting_factor(phi: float) -> float:
    """g(phi): reduces the influence of opponents with a high deviation."""
    return 1.0 / math.sqrt(1.0 + 3.0 * phi * phi / (math.pi * math.pi))


def expected_score(g: float, mu: float, opponent_mu: float) -> float:
    """E(mu, mu_opp, phi_opp) in (0, 1)."""
    x = g * (mu - opponent_mu)
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    # exp(-x) overflows for very negative x
    z = math.exp(x)
    return z / (1.0 + z)


def weigh(mu: float, outcome: Outcome) -> Evidence:
    """Precompute g and e for an outcome against a player with the given mu."""
    g = weighting_factor(outcome.opponent_phi)
    return Evidence(g=g, e=expected_score(g, mu, outcome.opponent_mu), score=outcome.score)


def aggregate_evidence(evidence: Sequence[Evidence]) -> tuple[float, float]:
    """Combine weighted outcomes into (v, delta).

    Outcomes whose information g²·e·(1-e) falls below
    MIN_EVIDENCE_INFORMATION are dropped, so a lopsided win and the mirrored
    lopsided loss are treated alike. v is infinite when nothing is left.
    """
    g = np.array([ev.g for ev in evidence], dtype=float)
    e = np.array([ev.e for ev in evidence], dtype=float)
    score = np.array([ev.score for ev in evidence], dtype=float)

    information = g * g * e * (1.0 - e)
    informative = information >= MIN_EVIDENCE_INFORMATION
    if not informative.any():
        return math.inf, 0.0
    v = 1.0 / float(np.sum(information[informative]))
    delta = v * float(np.sum((g * (score - e))[informative]))
    return v, delta


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class StrengthEstimator:
    """Glicko-2 online strength estimator.

    Holds only read-only system constants; the Strength passed to each call
    is the sole mutable state and is updated in place.
    """

    def __init__(
        self,
        bounds: Bounds,
        tau: float = DEFAULT_TAU,
        epsilon: float = DEFAULT_EPSILON,
        max_bracket_iterations: int = MAX_BRACKET_ITERATIONS,
        max_solver_iterations: int = MAX_SOLVER_ITERATIONS,
    ):
        if tau <= 0:
            raise ConfigurationError(f"tau must be positive, got {tau}")
        if epsilon <= 0:
            raise ConfigurationError(f"epsilon must be positive, got {epsilon}")
        if max_bracket_iterations < 1 or max_solver_iterations < 1:
            raise ConfigurationError("Solver iteration caps must be at least 1")
        self.bounds = bounds
        self.tau = tau
        self.epsilon = epsilon
        self.max_bracket_iterations = max_bracket_iterations
        self.max_solver_iterations = max_solver_iterations

    # ─── Entry points ───

    def estimate(self, strength: Strength, outcome: Outcome,
                 elapsed_fraction: float = 1.0) -> None:
        """Update strength with a single match outcome.

        Args:
            strength: Player strength at the onset of the update (mutated in place).
            outcome: Result of one match.
            elapsed_fraction: Fraction of a rating period since the last update.
        """
        self.apply_evidence(strength, [weigh(strength.mu, outcome)], elapsed_fraction)

    def estimate_batch(self, strength: Strength, outcomes: Iterable[Outcome],
                       elapsed_fraction: float = 1.0) -> None:
        """Update strength with several outcomes aggregated in one pass.

        Every outcome is weighted with the pre-update mu. An empty batch only
        grows the deviation for the elapsed time.
        """
        mu = strength.mu
        self.apply_evidence(strength, [weigh(mu, o) for o in outcomes], elapsed_fraction)

    def estimate_sequence(self, strength: Strength, outcomes: Iterable[Outcome],
                          elapsed_fraction: float = 1.0) -> None:
        """Apply outcomes one at a time, each weighted with the latest mu."""
        for outcome in outcomes:
            self.estimate(strength, outcome, elapsed_fraction)

    def apply_evidence(self, strength: Strength, evidence: Sequence[Evidence],
                       elapsed_fraction: float = 1.0) -> None:
        """Shared update core over precomputed evidence."""
        if not evidence:
            self.decay(strength, elapsed_fraction)
            return

        v, delta = aggregate_evidence(evidence)
        if math.isinf(v):
            logger.debug("Evidence carries no information, treating update as idle time")
            self.decay(strength, elapsed_fraction)
            return

        sigma = self.solve_volatility(strength.sigma, strength.phi, v, delta)
        phi, mu = self._propagate(strength, sigma, v, delta, elapsed_fraction)

        strength.mu = mu
        strength.phi = phi
        strength.sigma = sigma
        self.clamp(strength)

    def decay(self, strength: Strength, elapsed_fraction: float = 1.0) -> None:
        """No-match update: deviation grows, mu and sigma stay unchanged."""
        elapsed = max(0.0, elapsed_fraction)
        strength.phi = math.sqrt(strength.phi * strength.phi + strength.sigma * strength.sigma * elapsed)
        self.clamp(strength)

    def clamp(self, strength: Strength) -> None:
        """Saturate mu, phi and sigma into the configured bounds."""
        b = self.bounds
        if b.contains(strength):
            return
        logger.debug(f"Clamping strength into bounds: mu={strength.mu}, "
                     f"phi={strength.phi}, sigma={strength.sigma}")
        strength.mu = _clamp(strength.mu, b.min_mu, b.max_mu)
        strength.phi = _clamp(strength.phi, b.min_phi, b.max_phi)
        strength.sigma = _clamp(strength.sigma, b.min_sigma, b.max_sigma)

    # ─── Volatility solver ───

    def solve_volatility(self, sigma: float, phi: float, v: float, delta: float) -> float:
        """New volatility sigma' via the Illinois-modified secant method.

        Raises:
            ConvergenceError: bracket search or refinement exceeded its cap.
        """
        a = math.log(sigma * sigma)

        if delta * delta > phi * phi + v:
            B = math.log(delta * delta - phi * phi - v)
        else:
            k = 1
            while True:
                B = a - k * self.tau
                if self._volatility_objective(B, delta, phi, v, a) > 0:
                    break
                if k >= self.max_bracket_iterations:
                    logger.warning(
                        f"Volatility bracket search exhausted: sigma={sigma}, phi={phi}, "
                        f"v={v}, delta={delta}, tau={self.tau}"
                    )
                    raise ConvergenceError(
                        f"No volatility bracket found after {k} steps (tau={self.tau})"
                    )
                k += 1
            logger.debug(f"  Volatility bracket found at k={k}")

        A = a
        fA = self._volatility_objective(A, delta, phi, v, a)
        fB = self._volatility_objective(B, delta, phi, v, a)

        iterations = 0
        while abs(B - A) > self.epsilon:
            if iterations >= self.max_solver_iterations:
                logger.warning(
                    f"Volatility solver did not converge: sigma={sigma}, phi={phi}, "
                    f"v={v}, delta={delta}, |B-A|={abs(B - A)}"
                )
                raise ConvergenceError(
                    f"Volatility solver exceeded {self.max_solver_iterations} iterations "
                    f"(epsilon={self.epsilon})"
                )
            C = A + (A - B) * fA / (fB - fA)
            fC = self._volatility_objective(C, delta, phi, v, a)

            if fC * fB <= 0:
                A, fA = B, fB
            else:
                # Illinois correction
                fA /= 2

            B, fB = C, fC
            iterations += 1

        return math.exp(A / 2)

    def _volatility_objective(self, x: float, delta: float, phi: float,
                              v: float, a: float) -> float:
        ex = math.exp(x)
        tmp = phi * phi + v + ex
        return ex * (delta * delta - tmp) / (2 * tmp * tmp) - (x - a) / (self.tau * self.tau)

    # ─── State propagation ───

    @staticmethod
    def _propagate(strength: Strength, sigma: float, v: float, delta: float,
                   elapsed_fraction: float) -> tuple[float, float]:
        """Return (phi', mu') for the solved volatility."""
        elapsed = max(0.0, elapsed_fraction)
        phi_star = math.sqrt(strength.phi * strength.phi + sigma * sigma * elapsed)
        if phi_star == 0.0:
            phi = 0.0
        else:
            phi = 1.0 / math.sqrt(1.0 / (phi_star * phi_star) + 1.0 / v)
        mu = strength.mu + phi * phi * (delta / v)
        return phi, mu
