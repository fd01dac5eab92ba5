#!/usr/bin/env python3
"""
Data Update Script for the Lotto Analyzer

1. Re-downloads the full draw history from the open-data feed
2. Optionally appends a manually entered draw
3. Saves the CSV cache
"""
import argparse
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd

from lotto_analyzer.draws import InvalidDrawError, ensure_newest_first, make_draw_frame, parse_line
from lotto_analyzer.fetcher import cache_path, fetch_all_draws, read_data, save_data


def add_manual_draw(df, line):
    """Append one ``"M/D/YYYY, n n n n n + b"`` line to the dataset."""
    try:
        record = parse_line(line)
    except InvalidDrawError as e:
        print(f"[Update] Error: {e}")
        return df
    if record is None:
        return df

    new_row = make_draw_frame([record])
    if (df["date"] == new_row["date"].iloc[0]).any():
        print(f"[Update] Draw for {line.split(',')[0]} already present")
        return df
    combined = pd.concat([new_row, df], ignore_index=True)
    print(f"[Update] Added draw: {record['original_string']}")
    return ensure_newest_first(combined)


def main():
    parser = argparse.ArgumentParser(description="Update the lottery draw dataset")
    parser.add_argument("--add", help='Manual draw, e.g. "10/31/2025, 1 2 3 4 5 + 6"')
    parser.add_argument("--no-fetch", action="store_true",
                        help="Skip the download and use the existing cache")
    args = parser.parse_args()

    df = None
    if not args.no_fetch:
        df = fetch_all_draws()
    if df is None:
        if not os.path.exists(cache_path()):
            print("[Update] No data available. Nothing to update.")
            return 1
        df = read_data()
        print(f"[Update] Using cached data ({len(df)} draws)")

    if args.add:
        df = add_manual_draw(df, args.add)

    save_data(df)
    print(f"[Update] Saved {len(df)} draws to {cache_path()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
