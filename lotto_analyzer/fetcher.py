"""
Mega Millions Historical Data Fetcher

Downloads winning numbers from the New York State open-data feed, page by
page, and caches them as a CSV. Falls back to the built-in sample draws
when nothing can be fetched.
"""
import os
import time
import warnings

import pandas as pd
import requests

from lotto_analyzer.draws import (
    COLUMNS,
    InvalidDrawError,
    NUM_COLS,
    make_draw_frame,
    sample_draws,
    validate_draw,
)

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data")

API_URL = "https://data.ny.gov/resource/5xaw-6ayf.json"
PAGE_SIZE = 1000
MAX_RECORDS = 5000
PAGE_DELAY = 0.5
TIMEOUT = 15


def cache_path():
    """CSV cache location. ``LOTTO_DATA_DIR`` is read on every call."""
    return os.path.join(os.environ.get("LOTTO_DATA_DIR", DEFAULT_DATA_DIR), "draws.csv")


def records_from_api(rows):
    """
    Convert open-data rows into draw records.

    Each row looks like
    ``{"draw_date": "2025-10-28T00:00:00.000", "winning_numbers": "02 19 33 53 61",
    "mega_ball": "14"}``. Rows that fail to parse or validate are skipped.

    Returns
    -------
    (records, failed) : list of dicts, int
    """
    records = []
    failed = 0
    for row in rows:
        try:
            draw_date = pd.Timestamp(row["draw_date"]).normalize()
            nums = [int(t) for t in row["winning_numbers"].split()]
            if len(nums) < 5:
                raise InvalidDrawError(f"Too few numbers: {row['winning_numbers']}")
            bonus = int(str(row["mega_ball"]).strip())
            record = {
                "date": draw_date,
                "main_numbers": nums[:5],
                "bonus_number": bonus,
            }
            validate_draw(record["main_numbers"], bonus)
        except (KeyError, ValueError, TypeError) as e:
            failed += 1
            warnings.warn(f"[Fetcher] Skipping row {row!r}: {e}")
            continue
        records.append(record)
    return records, failed


def fetch_page(session, offset, limit=PAGE_SIZE):
    """One page of results, newest first."""
    params = {
        "$limit": limit,
        "$offset": offset,
        "$order": "draw_date DESC",
    }
    resp = session.get(API_URL, params=params, timeout=TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def fetch_all_draws(session=None, delay=PAGE_DELAY):
    """
    Download every page and return a complete newest-first DataFrame.

    Returns None if any request fails, so callers never see a partial
    collection. A session created here is closed before returning.
    """
    if session is None:
        with requests.Session() as own:
            return fetch_all_draws(own, delay)

    rows = []
    offset = 0

    print("[Fetcher] Starting Mega Millions data fetch...")
    try:
        while offset < MAX_RECORDS:
            page = fetch_page(session, offset, PAGE_SIZE)
            print(f"[Fetcher] Fetched {len(page)} rows at offset {offset}")
            if not page:
                break
            rows.extend(page)
            offset += PAGE_SIZE
            if len(page) < PAGE_SIZE:
                break
            if delay:
                time.sleep(delay)
    except (requests.RequestException, ValueError) as e:
        print(f"[Fetcher] Fetch failed: {e}")
        return None

    records, failed = records_from_api(rows)
    print(f"[Fetcher] Parsed: {len(records)}, failed: {failed}")
    if not records:
        return None
    return make_draw_frame(records)


def save_data(df, path=None):
    """Write the draws to the CSV cache."""
    path = path or cache_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    out = df.copy()
    out["date"] = out["date"].dt.strftime("%Y-%m-%d")
    out[COLUMNS].to_csv(path, index=False)


def read_data(path=None):
    """Read the CSV cache back into a newest-first draw frame."""
    path = path or cache_path()
    raw = pd.read_csv(path, dtype={"draw_id": str})
    records = []
    for _, row in raw.iterrows():
        records.append({
            "draw_id": row["draw_id"],
            "date": row["date"],
            "main_numbers": [int(row[c]) for c in NUM_COLS],
            "bonus_number": None if pd.isna(row["bonus_number"]) else int(row["bonus_number"]),
            "original_string": None if pd.isna(row["original_string"]) else row["original_string"],
        })
    return make_draw_frame(records)


def load_data(refresh=False, path=None):
    """
    Load the draw dataset.

    Uses the CSV cache when present; otherwise (or with ``refresh``) fetches
    from the open-data feed and saves the result. Falls back to the sample
    draws when the fetch fails and there is no cache.
    """
    path = path or cache_path()
    if os.path.exists(path) and not refresh:
        df = read_data(path)
        print(f"[Fetcher] Using cached data ({len(df)} draws)")
        return df

    df = fetch_all_draws()
    if df is not None:
        save_data(df, path)
        print(f"[Fetcher] Downloaded {len(df)} draws")
        return df

    if os.path.exists(path):
        print("[Fetcher] Fetch failed, keeping cached data")
        return read_data(path)

    warnings.warn("No data fetched, using built-in sample draws.")
    return sample_draws()


if __name__ == "__main__":
    load_data(refresh=True)
