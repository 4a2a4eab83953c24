"""End-to-end tests for the classify -> cluster -> resolve pipeline."""

import pytest

from errors import DuplicateError, NoPriceFound
from extraction import extract_pick
from models.pick import MarketType, Side
from models.tokens import FocalPoint
from odds import to_decimal
from services import slip_processor
from slip import PickSlip


def test_lakers_moneyline_scenario(nba_game, scenario_tokens):
    res = extract_pick(scenario_tokens, FocalPoint(176, 21), nba_game)
    assert res.ok
    pick = res.value
    assert pick.side == Side.HOME
    assert "Lakers" in pick.team_name
    assert pick.market_type == MarketType.MONEYLINE
    assert pick.price_american == "-150"
    assert pick.confidence == 0.9


def test_nothing_near_focal_point(nba_game, scenario_tokens):
    res = extract_pick(scenario_tokens, FocalPoint(2000, 2000), nba_game)
    assert isinstance(res.error, NoPriceFound)


def test_empty_recognition_result(nba_game):
    res = extract_pick([], FocalPoint(0, 0), nba_game)
    assert isinstance(res.error, NoPriceFound)


def test_all_low_confidence_tokens(make_token, nba_game):
    tokens = [
        make_token("Lakers", 60, 10, 60, 20, conf=0.3),
        make_token("-150", 150, 10, 50, 20, conf=0.35),
    ]
    res = extract_pick(tokens, FocalPoint(175, 20), nba_game)
    assert isinstance(res.error, NoPriceFound)


def test_extracted_pick_prices_the_slip(nba_game, scenario_tokens):
    slip = PickSlip()
    slip.add(extract_pick(scenario_tokens, FocalPoint(175, 20), nba_game).value)
    slip.add(extract_pick(scenario_tokens, FocalPoint(175, 70), nba_game).value)

    assert [leg.side for leg in slip.legs()] == [Side.HOME, Side.AWAY]
    expected = to_decimal("-150").value * to_decimal("+130").value
    assert slip.combined_odds().decimal_value == pytest.approx(expected)


class TestSlipProcessor:

    def test_add_capture(self, monkeypatch, nba_game, scenario_tokens):
        monkeypatch.setattr(slip_processor, "recognize_tokens", lambda img, config: scenario_tokens)
        slip = PickSlip()

        first = slip_processor.add_capture_to_slip(slip, b"img", FocalPoint(175, 20), nba_game)
        assert first.ok
        assert len(slip) == 1

        again = slip_processor.add_capture_to_slip(slip, b"img", FocalPoint(175, 20), nba_game)
        assert isinstance(again.error, DuplicateError)
        assert len(slip) == 1

    def test_failed_capture_leaves_slip_alone(self, monkeypatch, nba_game):
        monkeypatch.setattr(slip_processor, "recognize_tokens", lambda img, config: [])
        slip = PickSlip()
        res = slip_processor.add_capture_to_slip(slip, b"img", FocalPoint(0, 0), nba_game)
        assert isinstance(res.error, NoPriceFound)
        assert len(slip) == 0
