"""
Glicko-2 match log replay

1. CSV 매치 로그 로드 (match_id, played_at, player_id, opponent_id, score)
2. Glicko-2 순차 계산 (MatchBatch)
3. 결과 요약 출력
4. (옵션) player 레코드 CSV 저장

Usage:
    python -m scripts.run_glicko data/matches.csv
    python -m scripts.run_glicko data/matches.csv --output out/players.csv --top 20
    GLICKO_CONFIG=config/custom.yaml python -m scripts.run_glicko data/matches.csv
"""

import argparse
import logging
import os
import sys

import numpy as np
import pandas as pd
from dotenv import load_dotenv

# Setup
logging.basicConfig(level=logging.INFO, format='%(asctime)s %(message)s', datefmt='%H:%M:%S')
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from src.glicko.estimator_config import GlickoConfig
from src.glicko.match_batch import MatchBatch


def parse_args():
    parser = argparse.ArgumentParser(description='Glicko-2 match log replay')
    parser.add_argument('matches', type=str, help='Match log CSV path')
    parser.add_argument('--config', type=str, default=os.environ.get('GLICKO_CONFIG'),
                        help='Glicko-2 YAML config (default: $GLICKO_CONFIG or bundled config)')
    parser.add_argument('--output', type=str, help='Write player records to this CSV')
    parser.add_argument('--top', type=int, default=10, help='Players listed in the summary')
    return parser.parse_args()


def print_summary(batch: MatchBatch, top: int):
    """결과 요약."""
    print("\n" + "=" * 60)
    print("GLICKO-2 SUMMARY")
    print("=" * 60)

    records = batch.get_player_records()
    print(f"\nPlayers: {len(records):,}")
    print(f"Match Details: {len(batch.match_details):,}")
    print(f"OHLC Records: {len(batch.daily_ohlc):,}")
    if not records:
        return

    ratings = np.array([r['rating'] for r in records])
    deviations = np.array([r['deviation'] for r in records])
    print(f"\nRating Distribution:")
    print(f"  Mean: {ratings.mean():.1f}")
    print(f"  Min: {ratings.min():.1f}")
    print(f"  Max: {ratings.max():.1f}")
    print(f"  Std: {ratings.std():.1f}")
    print(f"  Mean deviation: {deviations.mean():.1f}")

    most_certain = sorted(records, key=lambda r: r['deviation'])[:top]
    print(f"\nMost Certain {len(most_certain)} Players:")
    for r in most_certain:
        print(f"  {r['player_id']}: rating={r['rating']:.1f} RD={r['deviation']:.1f} "
              f"vol={r['volatility']:.5f} (matches={r['match_count']})")

    least_certain = sorted(records, key=lambda r: -r['deviation'])[:top]
    print(f"\nLeast Certain {len(least_certain)} Players:")
    for r in least_certain:
        print(f"  {r['player_id']}: rating={r['rating']:.1f} RD={r['deviation']:.1f} "
              f"(matches={r['match_count']})")


def main():
    args = parse_args()

    print("=" * 60)
    print("Glicko-2 Match Log Replay")
    print("=" * 60)

    config = GlickoConfig(args.config)
    print(f"\nConfig v{config.version}: tau={config.tau}, epsilon={config.epsilon}, "
          f"period={config.period_duration:.0f}s")

    match_df = pd.read_csv(args.matches)
    print(f"Loaded {len(match_df):,} matches from {args.matches}")

    batch = MatchBatch(config=config)
    batch.process(match_df)

    print_summary(batch, args.top)

    if args.output:
        out = pd.DataFrame(batch.get_player_records())
        out.to_csv(args.output, index=False)
        print(f"\nWrote {len(out):,} player records to {args.output}")

    print("\nDone!")


if __name__ == '__main__':
    main()
