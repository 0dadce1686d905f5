"""Glicko-2 engine exceptions."""


class GlickoError(Exception):
    """Base class for all rating engine errors."""


class ConfigurationError(GlickoError, ValueError):
    """Invalid bounds, system constants or config file contents."""


class ConvergenceError(GlickoError, RuntimeError):
    """Volatility solver exceeded its iteration cap.

    Indicates an unrealistic configuration (tau too small, epsilon too tight)
    rather than a transient condition.
    """
