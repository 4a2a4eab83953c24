"""Tests for the OCR and ESPN adapters and config loading."""

import asyncio

import httpx
import pytest

from config import Config
from espn import fetch_scoreboard, find_game, game_context_from_event, game_for, scoreboard_urls
from ocr import tokens_from_easyocr, tokens_from_tesseract_data


class TestTesseract:

    def test_words_become_tokens(self):
        data = {
            "text": ["", "Lakers", "-150", "  "],
            "conf": ["-1", "96.5", 88, "-1"],
            "left": [0, 10, 80, 0],
            "top": [0, 5, 5, 0],
            "width": [300, 60, 45, 0],
            "height": [100, 20, 20, 0],
        }
        tokens = tokens_from_tesseract_data(data)
        assert [t.text for t in tokens] == ["Lakers", "-150"]
        assert tokens[0].confidence == pytest.approx(0.965)
        assert tokens[1].confidence == pytest.approx(0.88)
        assert tokens[1].bounding_box.center == (102.5, 15.0)

    def test_empty_result(self):
        assert tokens_from_tesseract_data({"text": [], "conf": [], "left": [], "top": [], "width": [], "height": []}) == []


def test_easyocr_quads():
    results = [
        ([[10, 5], [70, 5], [70, 25], [10, 25]], "Lakers", 0.91),
        ([[80, 6], [125, 6], [125, 24], [80, 24]], " ", 0.5),
    ]
    tokens = tokens_from_easyocr(results)
    assert len(tokens) == 1
    box = tokens[0].bounding_box
    assert (box.left, box.top, box.width, box.height) == (10, 5, 60, 20)
    assert tokens[0].confidence == 0.91


def _event(event_id, first, second):
    return {
        "id": event_id,
        "competitions": [{"competitors": [first, second]}],
    }


def _competitor(name, home_away):
    return {"homeAway": home_away, "team": {"displayName": name}}


class TestEspn:

    def test_home_is_taken_from_home_away_flag(self):
        ev = _event("401", _competitor("Golden State Warriors", "away"), _competitor("Los Angeles Lakers", "home"))
        ctx = game_context_from_event(ev, "NBA")
        assert ctx.home_team == "Los Angeles Lakers"
        assert ctx.away_team == "Golden State Warriors"
        assert ctx.sport == "basketball"
        assert ctx.ref == "401"

    def test_incomplete_event(self):
        assert game_context_from_event({"competitions": []}, "NBA") is None
        assert game_context_from_event(_event("1", _competitor("A", "home"), {"team": {}}), "NBA") is None

    def test_soccer_supports_draws(self):
        ev = _event("9", _competitor("Arsenal", "home"), _competitor("Chelsea", "away"))
        assert game_context_from_event(ev, "Soccer").supports_draws

    def test_find_game(self):
        events = [
            _event("1", _competitor("Boston Celtics", "home"), _competitor("Miami Heat", "away")),
            _event("2", _competitor("Los Angeles Lakers", "home"), _competitor("Golden State Warriors", "away")),
        ]
        ctx = find_game("Warriors @ Lakers", events, "NBA")
        assert ctx.game_id == "2"
        assert find_game("Yankees vs Mets", events, "NBA") is None
        assert find_game("", events, "NBA") is None


LAKERS_GAME = _event("2", _competitor("Los Angeles Lakers", "home"), _competitor("Golden State Warriors", "away"))
ARSENAL_GAME = _event("9", _competitor("Arsenal", "home"), _competitor("Chelsea", "away"))


def _run(coro_fn, handler):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await coro_fn(client)
    return asyncio.run(go())


class TestScoreboard:

    def test_game_for_fetches_and_matches(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json={"events": [LAKERS_GAME]})

        ctx = _run(lambda c: game_for(Config(), "NBA", "Warriors @ Lakers", client=c), handler)
        assert ctx.game_id == "2"
        assert ctx.home_team == "Los Angeles Lakers"
        assert seen == ["/apis/site/v2/sports/basketball/nba/scoreboard"]

    def test_game_for_server_error(self):
        ctx = _run(lambda c: game_for(Config(), "NBA", "Warriors @ Lakers", client=c),
                   lambda request: httpx.Response(503))
        assert ctx is None

    def test_single_league_error_raises(self):
        with pytest.raises(httpx.HTTPStatusError):
            _run(lambda c: fetch_scoreboard(Config(), "NBA", client=c), lambda request: httpx.Response(500))

    def test_soccer_merges_competitions_and_skips_failures(self):
        config = Config(soccer_competitions=["ENG.1", "ESP.1"])

        def handler(request):
            if "eng.1" in request.url.path:
                return httpx.Response(200, json={"events": [ARSENAL_GAME]})
            return httpx.Response(502)

        data = _run(lambda c: fetch_scoreboard(config, "Soccer", client=c), handler)
        assert [ev["id"] for ev in data["events"]] == ["9"]

    def test_unknown_league(self):
        assert scoreboard_urls(Config(), "Cricket") == []
        data = _run(lambda c: fetch_scoreboard(Config(), "Cricket", client=c),
                    lambda request: httpx.Response(500))
        assert data == {"events": []}


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("OCR_CONF", "0.55")
    monkeypatch.setenv("CLUSTER_RADIUS", "140")
    monkeypatch.setenv("DEBUG_LOGGING", "TRUE")
    config = Config.from_env()
    assert config.ocr_confidence_threshold == 0.55
    assert config.cluster_radius == 140.0
    assert config.debug_logging is True
    assert config.review_confidence_threshold == 0.6
