"""Shared builders for token and game fixtures."""

import pytest

from models.pick import GameContext
from models.tokens import Rect, TextToken


def _token(text, left, top, width=50, height=20, conf=0.95):
    return TextToken(text=text, bounding_box=Rect(left, top, width, height), confidence=conf)


@pytest.fixture
def make_token():
    return _token


@pytest.fixture
def nba_game():
    return GameContext(home_team="Los Angeles Lakers", away_team="Golden State Warriors", sport="basketball")


@pytest.fixture
def scenario_tokens():
    """Two-row moneyline widget: Lakers -150 over Warriors +130."""
    return [
        _token("Lakers", 60, 10, 60, 20, 0.95),
        _token("-150", 150, 10, 50, 20, 0.9),
        _token("Warriors", 60, 60, 70, 20, 0.95),
        _token("+130", 150, 60, 50, 20, 0.9),
    ]
