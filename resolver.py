import logging
from typing import Dict, List, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process

from classifier import PROP_KEYWORDS, TEAM_ABBREVIATIONS
from config import Config
from errors import NoPriceFound, Result, SideNotResolved, TeamNotResolved
from models.pick import GameContext, ManualSelection, MarketSource, MarketType, Pick, Side
from models.tokens import ClassifiedToken, TokenCluster, TokenRole
from odds import to_decimal

logger = logging.getLogger("resolver")

LABEL_MARKETS: Dict[str, MarketType] = {
    "ml": MarketType.MONEYLINE,
    "moneyline": MarketType.MONEYLINE,
    "spread": MarketType.SPREAD,
    "total": MarketType.TOTAL,
    "o/u": MarketType.TOTAL,
    "over": MarketType.TOTAL,
    "under": MarketType.TOTAL,
}
LABEL_MARKETS.update({kw: MarketType.PLAYER_PROP for kw in PROP_KEYWORDS})

OVER_LABELS = {"over", "o"}
UNDER_LABELS = {"under", "u"}
DRAW_WORDS = {"draw", "tie"}

PROP_TYPES = {
    "points": "Points", "pts": "Points",
    "rebounds": "Rebounds", "reb": "Rebounds",
    "assists": "Assists", "ast": "Assists",
    "yards": "Yards", "shots": "Shots",
}

MARKETS_NEEDING_TEAM = {MarketType.MONEYLINE, MarketType.SPREAD}


# ---------------------------------------------------------------------------
# Team matching
# ---------------------------------------------------------------------------

def _variants(name: str) -> List[str]:
    words = [w for w in name.lower().split() if len(w) >= 3]
    pairs = [" ".join(p) for p in zip(words, words[1:])]
    return [name.lower()] + words + pairs


def match_team(phrase: str, game: GameContext, threshold: float = 80.0) -> Tuple[Optional[Side], float]:
    """Match an OCR phrase to the home or away team.

    Substring first, then the abbreviation table, then a fuzzy ratio over the
    full name and its words. Returns (None, best_score) when nothing clears the
    threshold or both teams score the same.
    """
    p = (phrase or "").strip().lower()
    if len(p) < 2:
        return None, 0.0
    teams = [(Side.HOME, game.home_team), (Side.AWAY, game.away_team)]

    if len(p) >= 3:
        hits = [side for side, name in teams if p in name.lower() or name.lower() in p]
        if len(hits) == 1:
            return hits[0], 100.0

    nickname = TEAM_ABBREVIATIONS.get(p.upper())
    if nickname:
        hits = [side for side, name in teams if nickname.lower() in name.lower()]
        if len(hits) == 1:
            return hits[0], 100.0

    scores = []
    for side, name in teams:
        best = process.extractOne(p, _variants(name), scorer=fuzz.ratio)
        scores.append((best[1] if best else 0.0, side))
    scores.sort(key=lambda s: s[0], reverse=True)
    top_score, top_side = scores[0]
    if top_score < threshold or top_score == scores[1][0]:
        return None, top_score
    return top_side, top_score


# ---------------------------------------------------------------------------
# Cluster helpers
# ---------------------------------------------------------------------------

def _order_index(cluster: TokenCluster, token: ClassifiedToken) -> int:
    return cluster.tokens.index(token)


def _pick_price(cluster: TokenCluster) -> Optional[ClassifiedToken]:
    odds = cluster.with_role(TokenRole.ODDS)
    if not odds:
        return None
    # Highest confidence wins; ties go to the token nearest the focal point,
    # then to the earlier token in reading order.
    return min(odds, key=lambda t: (-t.confidence, cluster.distance(t), _order_index(cluster, t)))


def _nearest(tokens: Sequence[ClassifiedToken], anchor: ClassifiedToken, cluster: TokenCluster) -> Optional[ClassifiedToken]:
    if not tokens:
        return None
    return min(tokens, key=lambda t: (t.box.center_distance(anchor.box), _order_index(cluster, t)))


def _label(token: ClassifiedToken) -> str:
    return token.normalized.lower()


def _team_phrase(
    anchor: ClassifiedToken, cluster: TokenCluster, gap_factor: float
) -> List[ClassifiedToken]:
    """Grow the anchor into a multi-word name using same-row neighbours ("Red Sox")."""
    names = cluster.with_role(TokenRole.TEAM_NAME)
    phrase = [anchor]
    grew = True
    while grew:
        grew = False
        for t in names:
            if t in phrase:
                continue
            if any(t.box.adjacent_to(p.box, gap_factor) for p in phrase):
                phrase.append(t)
                grew = True
    phrase.sort(key=lambda t: t.box.left)
    return phrase


def _parse_line(token: Optional[ClassifiedToken]) -> Optional[float]:
    if token is None:
        return None
    return float(token.normalized)


def _is_half_point(token: ClassifiedToken) -> bool:
    return abs(abs(float(token.normalized)) % 1 - 0.5) < 1e-9


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def needs_manual_review(pick: Pick, config: Optional[Config] = None) -> bool:
    config = config or Config()
    return pick.confidence < config.review_confidence_threshold


def resolve(cluster: TokenCluster, game: GameContext, config: Optional[Config] = None) -> Result[Pick]:
    """Turn a token cluster into a Pick, or an explicit ExtractionError."""
    if cluster is None or game is None:
        raise TypeError("cluster and game are required")
    config = config or Config()
    gap = config.adjacency_gap_factor

    price = _pick_price(cluster)
    if price is None:
        return Result.failure(NoPriceFound())
    checked = to_decimal(price.normalized)
    if not checked.ok:
        return Result.failure(checked.error)
    used: List[ClassifiedToken] = [price]

    # Market: an explicit label always beats shape inference.
    labels = cluster.with_role(TokenRole.MARKET_LABEL)
    numbers = cluster.with_role(TokenRole.NUMBER)
    line_token: Optional[ClassifiedToken] = None
    prop_type: Optional[str] = None
    if labels:
        source = MarketSource.LABELED
        props = [t for t in labels if _label(t) in PROP_KEYWORDS]
        if props:
            market_token = _nearest(props, price, cluster)
            market = MarketType.PLAYER_PROP
            prop_type = PROP_TYPES.get(_label(market_token))
        else:
            market_token = _nearest(labels, price, cluster)
            # A lone O/U is only labelled when its line sits next to it.
            market = LABEL_MARKETS.get(_label(market_token), MarketType.TOTAL)
        used.append(market_token)
        if market != MarketType.MONEYLINE:
            line_token = _nearest(numbers, price, cluster)
    else:
        source = MarketSource.INFERRED
        market = MarketType.MONEYLINE
        halves = [t for t in numbers if _is_half_point(t) and t.box.adjacent_to(price.box, gap)]
        line_token = _nearest(halves, price, cluster)
        if line_token is not None:
            signed = line_token.normalized[0] in "+-"
            market = MarketType.SPREAD if signed else MarketType.TOTAL
    if line_token is not None:
        used.append(line_token)

    side: Optional[Side] = None
    team_name: Optional[str] = None
    player_name: Optional[str] = None

    if market in (MarketType.TOTAL, MarketType.PLAYER_PROP):
        ou = [t for t in labels if _label(t) in OVER_LABELS | UNDER_LABELS]
        ou_token = _nearest(ou, price, cluster)
        if ou_token is None:
            return Result.failure(SideNotResolved())
        if ou_token not in used:
            used.append(ou_token)
        side = Side.OVER if _label(ou_token) in OVER_LABELS else Side.UNDER

    team_tokens = cluster.with_role(TokenRole.TEAM_NAME)
    anchor = _nearest(team_tokens, price, cluster)
    if market in MARKETS_NEEDING_TEAM:
        if anchor is None:
            return Result.failure(TeamNotResolved(None, "no team name near the price"))
        phrase_tokens = _team_phrase(anchor, cluster, gap)
        phrase = " ".join(t.normalized for t in phrase_tokens)
        used.extend(phrase_tokens)
        if phrase.lower() in DRAW_WORDS:
            if market != MarketType.MONEYLINE or not game.supports_draws:
                return Result.failure(TeamNotResolved(phrase, f"draw not offered for {game.sport}"))
            side = Side.DRAW
        else:
            side, score = match_team(phrase, game, config.team_match_threshold)
            if side is None:
                logger.info(f"Team phrase {phrase!r} best score {score:.0f} below threshold")
                return Result.failure(TeamNotResolved(phrase))
            team_name = game.team_for(side)
    elif market == MarketType.PLAYER_PROP and anchor is not None:
        phrase_tokens = _team_phrase(anchor, cluster, gap)
        phrase = " ".join(t.normalized for t in phrase_tokens)
        used.extend(phrase_tokens)
        team_side, _ = match_team(phrase, game, config.team_match_threshold)
        if team_side is not None:
            team_name = game.team_for(team_side)
        else:
            player_name = phrase

    pick = Pick(
        game_ref=game.ref,
        market_type=market,
        side=side,
        price_american=price.normalized,
        team_name=team_name,
        line=_parse_line(line_token),
        player_name=player_name,
        prop_type=prop_type,
        confidence=min(t.confidence for t in used),
        market_source=source,
    )
    logger.debug(f"Resolved {pick.display_text} [{source.value}] confidence={pick.confidence:.2f}")
    return Result.success(pick)


def resolve_manual(selection: ManualSelection, game: GameContext, config: Optional[Config] = None) -> Result[Pick]:
    """Build a Pick from a selection the user made directly, bypassing OCR."""
    if selection is None or game is None:
        raise TypeError("selection and game are required")
    config = config or Config()

    price = to_decimal(selection.price_american)
    if not price.ok:
        return Result.failure(price.error)
    price_text = selection.price_american.strip()

    market, side = selection.market_type, selection.side
    team_name: Optional[str] = None
    player_name = selection.player_name
    prop_type = selection.prop_type if market == MarketType.PLAYER_PROP else None

    if market in (MarketType.TOTAL, MarketType.PLAYER_PROP):
        if side not in (Side.OVER, Side.UNDER):
            return Result.failure(SideNotResolved(f"{market.value} needs over or under, got {side.value}"))
        if market == MarketType.PLAYER_PROP and not player_name:
            player_name = selection.team_name
    elif side == Side.DRAW:
        if market != MarketType.MONEYLINE or not game.supports_draws:
            return Result.failure(TeamNotResolved(selection.team_name, f"draw not offered for {game.sport}"))
    elif side not in (Side.HOME, Side.AWAY):
        return Result.failure(TeamNotResolved(selection.team_name, f"{market.value} needs a team side"))
    else:
        if selection.team_name:
            matched, _ = match_team(selection.team_name, game, config.team_match_threshold)
            if matched is None:
                return Result.failure(TeamNotResolved(selection.team_name))
            if matched != side:
                return Result.failure(TeamNotResolved(selection.team_name, "team does not match the chosen side"))
        team_name = game.team_for(side)

    pick = Pick(
        game_ref=game.ref,
        market_type=market,
        side=side,
        price_american=price_text,
        team_name=team_name,
        line=selection.line,
        player_name=player_name,
        prop_type=prop_type,
        confidence=1.0,
        market_source=MarketSource.MANUAL,
    )
    logger.debug(f"Manual pick {pick.display_text}")
    return Result.success(pick)
