"""
Mega Millions Lotto Analyzer

Available modules:
- draws: draw schema, validation and text loader
- fetcher: open-data download and CSV cache
- analysis: frequency, pair, gap/due-ratio and hot-streak engines
- generator: lucky number generator
- selection: draw selection, cache and query service
"""

from . import draws
from . import analysis
from . import generator
from . import selection
from . import fetcher

__all__ = [
    "draws",
    "analysis",
    "generator",
    "selection",
    "fetcher",
]
