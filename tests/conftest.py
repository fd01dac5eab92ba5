import pandas as pd
import pytest

from lotto_analyzer.draws import make_draw_frame, sample_draws


def build_draws(rows, start="2025-10-28", step_days=3):
    """
    Newest-first frame from ``(main_numbers, bonus)`` tuples.
    The first row gets ``start``, each following row is ``step_days`` older.
    """
    start = pd.Timestamp(start)
    records = []
    for i, (nums, bonus) in enumerate(rows):
        records.append({
            "draw_id": f"d{i:04d}",
            "date": start - pd.Timedelta(days=step_days * i),
            "main_numbers": nums,
            "bonus_number": bonus,
        })
    return make_draw_frame(records)


@pytest.fixture
def example_draws():
    return build_draws([
        ([1, 2, 3, 4, 5], 10),
        ([1, 2, 3, 4, 5], 10),
        ([6, 7, 8, 9, 10], 11),
    ])


@pytest.fixture
def samples():
    return sample_draws()


@pytest.fixture
def empty_draws():
    return make_draw_frame([])
