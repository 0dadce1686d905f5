"""Rating period helpers.

elapsed_fraction generalizes Glicko-2's fixed rating period: 1.0 means one
full nominal period passed since the player's last update.
"""
from datetime import datetime
from typing import Optional

from src.glicko.exceptions import ConfigurationError
from src.glicko.glicko_config import DEFAULT_DURATION


def elapsed_fraction(
    last_played: Optional[datetime],
    played_at: datetime,
    duration: float = DEFAULT_DURATION,
) -> float:
    """Fraction of a rating period between two timestamps.

    Args:
        last_played: Time of the previous update (None for a first match).
        played_at: Time of the current update.
        duration: Rating period length in seconds.

    Returns:
        0.0 for a first match or a clock that did not advance.
    """
    if duration <= 0:
        raise ConfigurationError(f"Rating period duration must be positive, got {duration}")
    if last_played is None:
        return 0.0
    seconds = (played_at - last_played).total_seconds()
    if seconds <= 0:
        return 0.0
    return seconds / duration
