"""
Draw Records & Text Loader for Mega Millions

Parses draw lines in the form ``"10/28/2025, 2 19 33 53 61 + 14"`` into a
pandas DataFrame and validates every draw before it reaches the analysis
engines.

Data schema:
    draw_id, date, num1-num5, bonus_number, original_string

Main numbers range 1-70, the bonus ball 1-25. Frames are kept
newest-first: row 0 is the most recent draw.
"""
import uuid
import warnings
from datetime import datetime

import pandas as pd

NUM_COLS = [f"num{i}" for i in range(1, 6)]
COLUMNS = ["draw_id", "date"] + NUM_COLS + ["bonus_number", "original_string"]

MAIN_COUNT = 5
MAIN_MAX = 70
BONUS_MAX = 25
HIGH_BOUND = 35  # 1-35 = low, 36-70 = high


class InvalidDrawError(ValueError):
    """Raised when a draw breaks the 5-distinct-numbers-in-range rule."""


def validate_draw(main_numbers, bonus_number=None):
    """Reject anything that is not exactly 5 distinct numbers in 1-70."""
    if len(main_numbers) != MAIN_COUNT:
        raise InvalidDrawError(
            f"Expected {MAIN_COUNT} main numbers, got {len(main_numbers)}: {main_numbers}"
        )
    if len(set(main_numbers)) != MAIN_COUNT:
        raise InvalidDrawError(f"Main numbers must be unique: {main_numbers}")
    for n in main_numbers:
        if not 1 <= n <= MAIN_MAX:
            raise InvalidDrawError(f"Main number {n} outside 1-{MAIN_MAX}")
    if bonus_number is not None and not 1 <= bonus_number <= BONUS_MAX:
        raise InvalidDrawError(f"Bonus number {bonus_number} outside 1-{BONUS_MAX}")


def parse_line(line):
    """
    Parse one ``"M/D/YYYY, n n n n n + b"`` line into a record dict.

    Blank lines return None. The ``+ bonus`` part is optional.
    Raises InvalidDrawError for anything malformed.
    """
    line = line.strip()
    if not line:
        return None

    parts = line.split(",")
    if len(parts) != 2:
        raise InvalidDrawError(f"Invalid format - expected comma separator: {line}")

    date_str = parts[0].strip()
    try:
        draw_date = datetime.strptime(date_str, "%m/%d/%Y")
    except ValueError:
        raise InvalidDrawError(f"Could not parse date: {date_str}")

    numbers_str = parts[1].strip()
    number_parts = numbers_str.split("+")

    main_numbers = []
    for token in number_parts[0].split():
        try:
            main_numbers.append(int(token))
        except ValueError:
            continue

    bonus_number = None
    if len(number_parts) > 1:
        try:
            bonus_number = int(number_parts[1].strip())
        except ValueError:
            bonus_number = None

    validate_draw(main_numbers, bonus_number)

    return {
        "date": pd.Timestamp(draw_date),
        "main_numbers": main_numbers,
        "bonus_number": bonus_number,
        "original_string": numbers_str,
    }


def parse_text(text):
    """
    Parse a multi-line block of draws.

    Invalid lines are excluded with a warning; they never abort the parse.
    Returns a newest-first DataFrame.
    """
    records = []
    skipped = 0
    for line in text.splitlines():
        try:
            record = parse_line(line)
        except InvalidDrawError as e:
            warnings.warn(f"[Loader] Skipping draw: {e}")
            skipped += 1
            continue
        if record is not None:
            records.append(record)

    if skipped:
        print(f"[Loader] Parsed {len(records)} draws, skipped {skipped} invalid lines")
    return make_draw_frame(records)


def make_draw_frame(records):
    """
    Build a draw DataFrame from record dicts.

    Each record carries ``date``, ``main_numbers`` and optionally
    ``bonus_number``, ``original_string`` and ``draw_id``.
    """
    rows = []
    for rec in records:
        nums = [int(n) for n in rec["main_numbers"]]
        bonus = rec.get("bonus_number")
        if bonus is not None and not pd.isna(bonus):
            bonus = int(bonus)
        else:
            bonus = None
        validate_draw(nums, bonus)

        original = rec.get("original_string")
        if not original:
            original = " ".join(str(n) for n in nums)
            if bonus is not None:
                original += f" + {bonus}"

        row = {
            "draw_id": rec.get("draw_id") or uuid.uuid4().hex,
            "date": pd.Timestamp(rec["date"]).normalize(),
            "bonus_number": bonus,
            "original_string": original,
        }
        for col, n in zip(NUM_COLS, nums):
            row[col] = n
        rows.append(row)

    df = pd.DataFrame(rows, columns=COLUMNS)
    df["bonus_number"] = pd.array([r["bonus_number"] for r in rows], dtype="Int64")
    for col in NUM_COLS:
        df[col] = df[col].astype(int)
    df["date"] = pd.to_datetime(df["date"])
    return ensure_newest_first(df)


def ensure_newest_first(df):
    """Return a copy sorted by date descending (stable for same-day draws)."""
    df = df.copy()
    if not pd.api.types.is_datetime64_any_dtype(df["date"]):
        df["date"] = pd.to_datetime(df["date"])
    return df.sort_values("date", ascending=False, kind="mergesort").reset_index(drop=True)


# ---------------------------------------------------------------------------
# Per-draw helpers
# ---------------------------------------------------------------------------

def main_numbers(row):
    """The 5 main numbers of a draw row, in drawn order."""
    return [int(row[c]) for c in NUM_COLS]


def bonus_of(row):
    """The bonus number of a draw row, or None."""
    value = row["bonus_number"]
    if pd.isna(value):
        return None
    return int(value)


def date_string(value):
    """Format a date as M/D/YYYY (no zero padding)."""
    ts = pd.Timestamp(value)
    return f"{ts.month}/{ts.day}/{ts.year}"


def draw_sum(row):
    return sum(main_numbers(row))


def draw_total_sum(row):
    """Sum of the main numbers plus the bonus (0 when absent)."""
    return draw_sum(row) + (bonus_of(row) or 0)


def even_count(row):
    return sum(1 for n in main_numbers(row) if n % 2 == 0)


def odd_count(row):
    return MAIN_COUNT - even_count(row)


def high_count(row):
    return sum(1 for n in main_numbers(row) if n > HIGH_BOUND)


def low_count(row):
    return MAIN_COUNT - high_count(row)


def even_odd_ratio(row):
    return f"{even_count(row)}:{odd_count(row)}"


def low_high_ratio(row):
    return f"{low_count(row)}:{high_count(row)}"


# ---------------------------------------------------------------------------
# Built-in sample data
# ---------------------------------------------------------------------------

SAMPLE_DATA = """\
10/28/2025, 2 19 33 53 61 + 14
10/24/2025, 11 18 31 51 56 + 24
10/21/2025, 2 18 27 34 59 + 18
10/17/2025, 9 21 27 48 56 + 10
10/14/2025, 12 22 49 57 58 + 19
10/10/2025, 3 18 23 32 56 + 8
10/7/2025, 17 26 33 45 56 + 19
10/3/2025, 18 19 38 54 57 + 19
9/30/2025, 4 8 27 37 63 + 14
9/26/2025, 4 21 27 33 49 + 21
9/23/2025, 13 24 41 42 70 + 18
9/19/2025, 2 22 27 42 58 + 8
9/16/2025, 10 14 34 40 43 + 5
9/12/2025, 17 18 21 42 64 + 7
9/9/2025, 6 43 52 64 65 + 22
9/5/2025, 6 14 36 58 62 + 24
9/2/2025, 7 17 35 40 64 + 23
8/29/2025, 13 31 32 44 45 + 21
8/26/2025, 7 12 30 40 69 + 17
8/22/2025, 18 30 44 48 50 + 12
8/19/2025, 10 19 24 49 68 + 10
8/15/2025, 4 17 27 34 69 + 16
8/12/2025, 1 8 31 56 67 + 23
8/8/2025, 2 6 8 14 49 + 12
8/5/2025, 12 27 42 59 65 + 2
8/1/2025, 18 27 29 33 70 + 22
7/29/2025, 17 30 34 63 67 + 11
7/25/2025, 14 21 25 49 52 + 7
7/22/2025, 22 41 42 59 69 + 17
7/18/2025, 11 43 54 55 63 + 3
"""


def sample_draws():
    """The built-in 30-draw sample, newest-first."""
    return parse_text(SAMPLE_DATA)
