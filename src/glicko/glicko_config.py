"""Glicko-2 설정 상수 (recommended values from Glickman's paper)."""

# 미평가 선수의 기본 rating / deviation
DEFAULT_RATING = 1500.0
# Also the upper deviation bound: the system is never less certain about a
# player than it is about an unrated one.
DEFAULT_DEVIATION = 350.0
DEFAULT_VOLATILITY = 0.06

# System constant (volatility change constraint)
DEFAULT_TAU = 0.5

# Glicko-2 scale factor (173.7178 = 400 / ln(10))
DEFAULT_FACTOR = 173.7178

# Volatility solver convergence tolerance
DEFAULT_EPSILON = 0.000001

# Nominal rating period duration in seconds (one week)
DEFAULT_DURATION = 60 * 60 * 24 * 7

# ─── Solver iteration caps ───

MAX_BRACKET_ITERATIONS = 1000
MAX_SOLVER_ITERATIONS = 1000

# ─── Default bounds (human rating scale) ───

MIN_RATING = 10.0
MAX_RATING = 5000.0
MIN_DEVIATION = 50.0
MAX_DEVIATION = DEFAULT_DEVIATION
MIN_VOLATILITY = 0.04
MAX_VOLATILITY = 0.08

# Outcomes with g²·e·(1-e) below this carry no usable information
# (|g·(mu - mu_opp)| beyond ~34.5); e rounds to exactly 1.0 soon after.
MIN_EVIDENCE_INFORMATION = 1e-15
