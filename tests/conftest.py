"""
Shared pytest fixtures for word-generation tests.
"""
from typing import List

import pytest

from garbler.services.stats_cruncher import StatsCruncher
from garbler.services.stats_library import StatsLibrary
from garbler.services.word_builder import WordBuilder


SIMPLE_LINE = "abcd abcd bccx"
PREFIX_LINE = "abc abcd abcde aaaa aabbb"

LATIN_LINES = [
    "Lorem ipsum dolor sit amet, quando exerci at mel. Ea duo wisi iusto, ad scribentur comprehensam nec.",
    "Erat consectetuer comprehensam vim ad, et mei dolore aliquid officiis. Clita eleifend at pri.",
    "Mel lorem bonorum cu, in duo nemore necessitatibus. Mei vitae utinam cu. Natum dicunt placerat sed.",
    "Et quo elitr fuisset. Vim cu cetero laoreet cotidieque, vis ei noluisse persequeris reformidans.",
]


@pytest.fixture
def latin_lines() -> List[str]:
    """Sample training text."""
    return list(LATIN_LINES)


@pytest.fixture
def prefix_library() -> StatsLibrary:
    """Library trained on words sharing the 'abc' prefix."""
    library = StatsLibrary()
    library.parse_line(PREFIX_LINE)
    return library


@pytest.fixture
def latin_library(latin_lines) -> StatsLibrary:
    """Library trained on the latin sample text."""
    library = StatsLibrary()
    for line in latin_lines:
        library.parse_line(line, ",.")
    return library


@pytest.fixture
def latin_cruncher(latin_library) -> StatsCruncher:
    """Cruncher over the latin library with metrics computed."""
    return StatsCruncher(latin_library)


@pytest.fixture
def seeded_builder(latin_cruncher) -> WordBuilder:
    """Word builder with a fixed seed."""
    return WordBuilder(latin_cruncher, seed=1234)
