import logging
import re
from typing import Dict, List, Optional, Sequence

from config import Config
from models.tokens import ClassifiedToken, Rect, TextToken, TokenRole

logger = logging.getLogger("classifier")

ODDS_RE = re.compile(r"^[+-]\d{3,4}$")
NUMBER_RE = re.compile(r"^[+-]?\d+(\.\d+)?$")
SPREAD_LINE_RE = re.compile(r"^[+-]\d+\.5$")
TEAM_RE = re.compile(r"^[A-Za-z][A-Za-z.'&-]*$")

OVER_UNDER_KEYWORDS = {"over", "under", "o/u"}
# Lone letters only count as over/under when a line sits right next to them.
SHORT_OVER_UNDER = {"o", "u"}
PROP_KEYWORDS = {"prop", "points", "pts", "rebounds", "reb", "assists", "ast", "yards", "shots"}
MARKET_KEYWORDS = {"ml", "moneyline", "spread", "total"} | OVER_UNDER_KEYWORDS | PROP_KEYWORDS

_DASHES = str.maketrans({"−": "-", "–": "-", "—": "-"})
_EVEN_MONEY = {"even", "ev", "evs"}

# Scoreboard abbreviations that show up on odds widgets instead of nicknames.
TEAM_ABBREVIATIONS: Dict[str, str] = {
    # NBA
    "ATL": "Hawks", "BOS": "Celtics", "BKN": "Nets", "CHA": "Hornets", "CHI": "Bulls",
    "CLE": "Cavaliers", "DAL": "Mavericks", "DEN": "Nuggets", "DET": "Pistons",
    "GSW": "Warriors", "HOU": "Rockets", "IND": "Pacers", "LAC": "Clippers",
    "LAL": "Lakers", "MEM": "Grizzlies", "MIA": "Heat", "MIL": "Bucks",
    "MIN": "Timberwolves", "NOP": "Pelicans", "NYK": "Knicks", "OKC": "Thunder",
    "ORL": "Magic", "PHI": "76ers", "PHX": "Suns", "POR": "Trail Blazers",
    "SAC": "Kings", "SAS": "Spurs", "TOR": "Raptors", "UTA": "Jazz", "WAS": "Wizards",
    # NFL
    "ARI": "Cardinals", "BAL": "Ravens", "BUF": "Bills", "CAR": "Panthers",
    "CIN": "Bengals", "GB": "Packers", "JAX": "Jaguars", "KC": "Chiefs",
    "LAR": "Rams", "LV": "Raiders", "NE": "Patriots", "NYG": "Giants", "NYJ": "Jets",
    "PIT": "Steelers", "SEA": "Seahawks", "SF": "49ers", "TB": "Buccaneers", "TEN": "Titans",
    # MLB
    "NYY": "Yankees", "NYM": "Mets", "LAD": "Dodgers", "SDP": "Padres", "STL": "Cardinals",
    "CHC": "Cubs", "CWS": "White Sox", "TEX": "Rangers",
}


def normalize_text(text: str) -> str:
    """Undo the usual OCR noise around prices: odd dashes, brackets, split signs."""
    s = (text or "").strip().translate(_DASHES)
    s = s.strip("()[]").rstrip(",;:").strip()
    s = re.sub(r"^([+-])\s+(\d)", r"\1\2", s)
    if s.lower() in _EVEN_MONEY:
        return "+100"
    return s


def is_keyword(normalized: str) -> bool:
    return normalized.lower() in MARKET_KEYWORDS


def _is_team_like(normalized: str) -> bool:
    if not TEAM_RE.match(normalized):
        return False
    if normalized.isupper() and normalized in TEAM_ABBREVIATIONS:
        return True
    return sum(ch.isalpha() for ch in normalized) >= 3


def _adjacent_to_any(box: Rect, others: Sequence[Rect], gap_factor: float) -> bool:
    return any(box.adjacent_to(o, gap_factor) for o in others)


def classify(tokens: Sequence[TextToken], config: Optional[Config] = None) -> List[ClassifiedToken]:
    """Tag every token with a role. Pure; output order matches input order."""
    if tokens is None:
        raise TypeError("tokens is required")
    config = config or Config()
    min_conf = config.ocr_confidence_threshold

    normalized = [normalize_text(t.text) for t in tokens]
    confident = [(t, n) for t, n in zip(tokens, normalized) if t.confidence >= min_conf]
    ou_boxes = [
        t.bounding_box
        for t, n in confident
        if n.lower() in OVER_UNDER_KEYWORDS or n.lower() in SHORT_OVER_UNDER
    ]
    line_boxes = [t.bounding_box for t, n in confident if NUMBER_RE.match(n) and not ODDS_RE.match(n)]

    out: List[ClassifiedToken] = []
    for tok, norm in zip(tokens, normalized):
        role = _role_for(tok, norm, ou_boxes, line_boxes, config)
        out.append(ClassifiedToken(token=tok, role=role, normalized=norm))

    if config.debug_logging:
        summary = ", ".join(f"{c.text!r}={c.role.value}" for c in out)
        logger.debug(f"Classified {len(out)} tokens: {summary}")
    return out


def _role_for(
    tok: TextToken, norm: str, ou_boxes: Sequence[Rect], line_boxes: Sequence[Rect], config: Config
) -> TokenRole:
    # A low-confidence read must never become a price.
    if tok.confidence < config.ocr_confidence_threshold:
        return TokenRole.NOISE
    gap = config.adjacency_gap_factor
    if ODDS_RE.match(norm):
        return TokenRole.ODDS
    if NUMBER_RE.match(norm):
        if _adjacent_to_any(tok.bounding_box, ou_boxes, gap):
            return TokenRole.NUMBER
        if SPREAD_LINE_RE.match(norm):
            return TokenRole.NUMBER
        return TokenRole.NOISE
    if is_keyword(norm):
        return TokenRole.MARKET_LABEL
    if norm.lower() in SHORT_OVER_UNDER:
        if _adjacent_to_any(tok.bounding_box, line_boxes, gap):
            return TokenRole.MARKET_LABEL
        return TokenRole.NOISE
    if _is_team_like(norm):
        return TokenRole.TEAM_NAME
    return TokenRole.NOISE
