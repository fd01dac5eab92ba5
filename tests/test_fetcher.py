import pandas as pd
import pytest
import requests

from lotto_analyzer import fetcher


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        return self.payload


class FakeSession:
    """Serves the given pages in order and records the params it was asked for."""

    def __init__(self, pages):
        self.pages = list(pages)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(params)
        return self.pages.pop(0)


def api_row(date, numbers, mega):
    return {
        "draw_date": f"{date}T00:00:00.000",
        "winning_numbers": numbers,
        "mega_ball": mega,
    }


ROWS = [
    api_row("2025-10-28", "02 19 33 53 61", "14"),
    api_row("2025-10-24", "11 18 31 51 56", "24"),
    api_row("2025-10-21", "02 18 27 34 59", "18"),
]


def test_records_from_api_parses_rows():
    records, failed = fetcher.records_from_api(ROWS)
    assert failed == 0
    assert records[0]["main_numbers"] == [2, 19, 33, 53, 61]
    assert records[0]["bonus_number"] == 14
    assert records[0]["date"] == pd.Timestamp("2025-10-28")


def test_records_from_api_skips_bad_rows():
    rows = ROWS + [
        api_row("2025-10-17", "09 21 27", "10"),
        api_row("2025-10-14", "12 22 49 57 58", "x"),
        {"draw_date": "2025-10-10T00:00:00.000"},
    ]
    with pytest.warns(UserWarning):
        records, failed = fetcher.records_from_api(rows)
    assert len(records) == 3
    assert failed == 3


def test_fetch_all_draws_single_short_page():
    session = FakeSession([FakeResponse(ROWS)])
    df = fetcher.fetch_all_draws(session=session, delay=0)
    assert len(df) == 3
    assert df["date"].is_monotonic_decreasing
    assert session.calls[0]["$order"] == "draw_date DESC"
    assert session.calls[0]["$offset"] == 0


def test_fetch_all_draws_paginates(monkeypatch):
    monkeypatch.setattr(fetcher, "PAGE_SIZE", 2)
    session = FakeSession([FakeResponse(ROWS[:2]), FakeResponse(ROWS[2:])])
    df = fetcher.fetch_all_draws(session=session, delay=0)
    assert len(df) == 3
    assert [c["$offset"] for c in session.calls] == [0, 2]


def test_fetch_failure_returns_none(monkeypatch):
    monkeypatch.setattr(fetcher, "PAGE_SIZE", 1)
    session = FakeSession([FakeResponse(ROWS[:1]), FakeResponse([], status=500)])
    assert fetcher.fetch_all_draws(session=session, delay=0) is None


def test_save_and_read_cache(tmp_path, samples):
    path = str(tmp_path / "draws.csv")
    fetcher.save_data(samples, path)
    loaded = fetcher.read_data(path)
    assert list(loaded["draw_id"]) == list(samples["draw_id"])
    assert loaded[fetcher.NUM_COLS].equals(samples[fetcher.NUM_COLS])
    assert list(loaded["bonus_number"]) == list(samples["bonus_number"])


def test_load_data_prefers_cache(tmp_path, samples, monkeypatch):
    path = str(tmp_path / "draws.csv")
    fetcher.save_data(samples, path)
    monkeypatch.setattr(fetcher, "fetch_all_draws", lambda: pytest.fail("should not fetch"))
    assert len(fetcher.load_data(path=path)) == len(samples)


def test_load_data_fetches_and_saves(tmp_path, example_draws, monkeypatch):
    path = str(tmp_path / "sub" / "draws.csv")
    monkeypatch.setattr(fetcher, "fetch_all_draws", lambda: example_draws)
    df = fetcher.load_data(path=path)
    assert len(df) == 3
    assert len(fetcher.read_data(path)) == 3


def test_load_data_falls_back_to_sample(tmp_path, monkeypatch):
    path = str(tmp_path / "draws.csv")
    monkeypatch.setattr(fetcher, "fetch_all_draws", lambda: None)
    with pytest.warns(UserWarning):
        df = fetcher.load_data(path=path)
    assert len(df) == 30


class ClosingSession(FakeSession):
    def __init__(self, pages):
        super().__init__(pages)
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True


def test_own_session_is_closed(monkeypatch):
    session = ClosingSession([FakeResponse(ROWS)])
    monkeypatch.setattr(requests, "Session", lambda: session)
    df = fetcher.fetch_all_draws(delay=0)
    assert len(df) == 3
    assert session.closed


def test_data_dir_env_read_at_call_time(tmp_path, example_draws, monkeypatch):
    monkeypatch.setenv("LOTTO_DATA_DIR", str(tmp_path))
    monkeypatch.setattr(fetcher, "fetch_all_draws", lambda: example_draws)
    assert fetcher.cache_path() == str(tmp_path / "draws.csv")
    fetcher.load_data()
    assert (tmp_path / "draws.csv").exists()
