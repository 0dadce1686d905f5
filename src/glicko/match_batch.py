"""
Glicko-2 Match Batch Processor

Replays a match log in chronological order, updating both sides of every
match with the sequential (one outcome per update) estimator, and builds
per-match detail + daily OHLC records on the human rating scale.

Usage:
    batch = MatchBatch()
    batch.process(match_df)
    # Results:
    batch.players        → {player_id: PlayerGlickoState}
    batch.match_details  → [dict, ...]
    batch.daily_ohlc     → [DailyOhlc, ...]

match_df columns: match_id, played_at, player_id, opponent_id, score
  score is from player_id's point of view (1 win, 0.5 draw, 0 loss);
  the opponent is credited with 1 - score.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

import pandas as pd

from src.glicko.estimator_config import GlickoConfig
from src.glicko.glicko_types import Outcome, Strength
from src.glicko.period import elapsed_fraction

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('match_id', 'played_at', 'player_id', 'opponent_id', 'score')


@dataclass
class PlayerGlickoState:
    """Tracked player: internal-scale strength plus match bookkeeping."""
    player_id: int
    strength: Strength
    match_count: int = 0
    last_played: Optional[datetime] = None


@dataclass
class DailyOhlc:
    """Daily rating OHLC."""
    player_id: int
    game_date: date
    open_rating: float
    high_rating: float
    low_rating: float
    close_rating: float
    matches: int = 0

    @property
    def delta(self) -> float:
        return self.close_rating - self.open_rating

    @property
    def rating_range(self) -> float:
        return self.high_rating - self.low_rating


class MatchBatch:
    """Sequential Glicko-2 match log processor."""

    def __init__(self, config: GlickoConfig | None = None,
                 initial_states: dict[int, PlayerGlickoState] | None = None):
        self.config = config or GlickoConfig()
        self.scale = self.config.scale
        self.estimator = self.config.build_estimator()
        self.players: dict[int, PlayerGlickoState] = dict(initial_states) if initial_states else {}
        self.match_details: list[dict] = []
        self.daily_ohlc: list[DailyOhlc] = []
        self._active_player_ids: set[int] = set()

        # OHLC tracking
        self._current_date: Optional[date] = None
        self._day_open: dict[int, float] = {}
        self._day_high: dict[int, float] = {}
        self._day_low: dict[int, float] = {}
        self._day_matches: dict[int, int] = {}

    def _get_player(self, player_id: int) -> PlayerGlickoState:
        if player_id not in self.players:
            self.players[player_id] = PlayerGlickoState(
                player_id=player_id,
                strength=self.config.new_strength(),
            )
        return self.players[player_id]

    def rating_of(self, player_id: int) -> float:
        return self.scale.mu_to_rating(self._get_player(player_id).strength.mu)

    def _record_ohlc_open(self, player_id: int, rating: float):
        if player_id not in self._day_open:
            self._day_open[player_id] = rating
            self._day_high[player_id] = rating
            self._day_low[player_id] = rating
            self._day_matches[player_id] = 0

    def _update_ohlc(self, player_id: int, rating: float):
        self._day_high[player_id] = max(self._day_high[player_id], rating)
        self._day_low[player_id] = min(self._day_low[player_id], rating)
        self._day_matches[player_id] += 1

    def _finalize_day(self, game_date: date):
        for player_id, open_rating in self._day_open.items():
            self.daily_ohlc.append(DailyOhlc(
                player_id=player_id,
                game_date=game_date,
                open_rating=open_rating,
                high_rating=self._day_high[player_id],
                low_rating=self._day_low[player_id],
                close_rating=self.rating_of(player_id),
                matches=self._day_matches[player_id],
            ))
        self._day_open.clear()
        self._day_high.clear()
        self._day_low.clear()
        self._day_matches.clear()

    def _apply(self, state: PlayerGlickoState, opponent: Strength, score: float,
               played_at: datetime) -> tuple[Strength, float]:
        """Update one side of a match; returns (strength before, elapsed fraction)."""
        before = replace(state.strength)
        fraction = elapsed_fraction(state.last_played, played_at, self.config.period_duration)
        outcome = Outcome(opponent_mu=opponent.mu, opponent_phi=opponent.phi, score=score)
        self.estimator.estimate(state.strength, outcome, fraction)
        state.match_count += 1
        state.last_played = played_at
        return before, fraction

    def _detail(self, match_id: int, state: PlayerGlickoState, opponent_id: int,
                score: float, before: Strength, fraction: float) -> dict:
        after = state.strength
        return {
            'match_id': match_id,
            'player_id': state.player_id,
            'opponent_id': opponent_id,
            'score': score,
            'elapsed_fraction': fraction,
            'rating_before': self.scale.mu_to_rating(before.mu),
            'rating_after': self.scale.mu_to_rating(after.mu),
            'deviation_before': self.scale.phi_to_deviation(before.phi),
            'deviation_after': self.scale.phi_to_deviation(after.phi),
            'volatility_before': before.sigma,
            'volatility_after': after.sigma,
        }

    def process(self, match_df: pd.DataFrame):
        """Process a match DataFrame (sorted by played_at, match_id)."""
        missing = [c for c in REQUIRED_COLUMNS if c not in match_df.columns]
        if missing:
            raise KeyError(f"Match log missing columns: {missing}")

        df = match_df.copy()
        df['played_at'] = pd.to_datetime(df['played_at'])
        df = df.sort_values(['played_at', 'match_id'], kind='stable').reset_index(drop=True)
        total = len(df)

        for idx, row in df.iterrows():
            played_at = row['played_at'].to_pydatetime()
            game_date = played_at.date()

            # 날짜 변경 → OHLC 저장
            if self._current_date is not None and game_date != self._current_date:
                self._finalize_day(self._current_date)
            self._current_date = game_date

            match_id = int(row['match_id'])
            player_id = int(row['player_id'])
            opponent_id = int(row['opponent_id'])
            score = float(row['score'])
            self._active_player_ids.add(player_id)
            self._active_player_ids.add(opponent_id)

            player = self._get_player(player_id)
            opponent = self._get_player(opponent_id)
            self._record_ohlc_open(player_id, self.rating_of(player_id))
            self._record_ohlc_open(opponent_id, self.rating_of(opponent_id))

            # Both sides are weighted against the other's pre-match strength
            player_snapshot = replace(player.strength)
            opponent_snapshot = replace(opponent.strength)

            player_before, player_fraction = self._apply(
                player, opponent_snapshot, score, played_at)
            opponent_before, opponent_fraction = self._apply(
                opponent, player_snapshot, 1.0 - score, played_at)

            self._update_ohlc(player_id, self.rating_of(player_id))
            self._update_ohlc(opponent_id, self.rating_of(opponent_id))

            self.match_details.append(self._detail(
                match_id, player, opponent_id, score, player_before, player_fraction))
            self.match_details.append(self._detail(
                match_id, opponent, player_id, 1.0 - score, opponent_before, opponent_fraction))

            if (idx + 1) % 50000 == 0:
                logger.info(f"  Processed {idx + 1:,} / {total:,} matches")

        if self._current_date is not None:
            self._finalize_day(self._current_date)
            self._current_date = None

        logger.info(f"  Completed {total:,} matches, {len(self.daily_ohlc):,} OHLC records")

    def get_player_records(self, active_only: bool = False) -> list[dict]:
        """Current human-scale snapshot per player.

        Args:
            active_only: only players seen by this batch's process() calls.
        """
        records = []
        for pid, state in self.players.items():
            if active_only and pid not in self._active_player_ids:
                continue
            records.append({
                'player_id': pid,
                'rating': self.scale.mu_to_rating(state.strength.mu),
                'deviation': self.scale.phi_to_deviation(state.strength.phi),
                'volatility': state.strength.sigma,
                'match_count': state.match_count,
                'last_played': state.last_played.isoformat() if state.last_played else None,
            })
        return records
