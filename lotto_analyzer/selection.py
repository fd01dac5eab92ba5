"""
Draw Selection & Analysis Cache

The selection is the subset of loaded draws included in analysis. Engine
output is cached against a key derived from the selected draw ids, so the
tables are only recomputed when the selection (or the data) changes.
"""
import pandas as pd

from lotto_analyzer import analysis
from lotto_analyzer.generator import generate_lucky_numbers


def selection_cache_key(selected_ids) -> str:
    """Deterministic key: the sorted selected ids joined together."""
    return "".join(sorted(str(i) for i in selected_ids))


class SelectionCache:
    """Key -> table store. Tables from a different key are never returned."""

    def __init__(self):
        self.key = ""
        self._tables = {}

    def get(self, name, key):
        if key != self.key:
            return None
        return self._tables.get(name)

    def put(self, name, key, value):
        if key != self.key:
            self._tables = {}
            self.key = key
        self._tables[name] = value

    def clear(self):
        self._tables = {}
        self.key = ""

    def __len__(self):
        return len(self._tables)


class DrawSelection:
    """
    Loaded draws plus the set of selected draw ids.

    Every mutation clears the attached cache. The draw frame itself is
    replaced wholesale, never edited in place.
    """

    def __init__(self, draws: pd.DataFrame, cache: SelectionCache = None):
        self.cache = cache if cache is not None else SelectionCache()
        self.draws = draws
        self.selected = set(draws["draw_id"])

    def replace_draws(self, draws: pd.DataFrame):
        """Swap in a newly loaded collection; everything starts selected."""
        self.draws = draws
        self.selected = set(draws["draw_id"])
        self.cache.clear()

    def toggle(self, draw_id):
        if draw_id in self.selected:
            self.selected.remove(draw_id)
        else:
            self.selected.add(draw_id)
        self.cache.clear()

    def select_all(self):
        self.selected = set(self.draws["draw_id"])
        self.cache.clear()

    def deselect_all(self):
        self.selected = set()
        self.cache.clear()

    def is_selected(self, draw_id) -> bool:
        return draw_id in self.selected

    def selected_draws(self) -> pd.DataFrame:
        """Selected rows, in the collection's newest-first order."""
        mask = self.draws["draw_id"].isin(self.selected)
        return self.draws[mask].reset_index(drop=True)

    def cache_key(self) -> str:
        return selection_cache_key(self.selected)


class AnalysisService:
    """Query facade over a DrawSelection, caching the engine tables."""

    def __init__(self, selection: DrawSelection):
        self.selection = selection

    @property
    def cache(self):
        return self.selection.cache

    def _cached(self, name, compute):
        key = self.selection.cache_key()
        hit = self.cache.get(name, key)
        if hit is not None:
            return hit
        result = compute(self.selection.selected_draws())
        self.cache.put(name, key, result)
        return result

    def frequency(self):
        return self._cached("frequency", analysis.count_main_numbers)

    def least_common(self):
        return self._cached("least_common", analysis.least_common)

    def bonus_frequency(self):
        return self._cached("bonus_frequency", analysis.count_bonus_numbers)

    def pairs(self):
        return self._cached("pairs", analysis.count_pairs)

    def gaps(self):
        return self._cached("gaps", analysis.number_gap_analysis)

    def hot_streaks(self):
        return self._cached("hot_streaks", analysis.hot_streaks)

    def statistics(self):
        return self._cached("statistics", analysis.calculate_statistics)

    def lucky_numbers(self, rng=None):
        """A fresh pick on every call; only the input tables are cached."""
        return generate_lucky_numbers(
            self.selection.selected_draws(),
            frequencies=self.frequency(),
            pairs=self.pairs(),
            gaps=self.gaps(),
            rng=rng,
        )
