import re
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

AMERICAN_PRICE_RE = re.compile(r"^[+-]\d+$")

# Sports where a three-way (draw) result is offered.
DRAW_SPORTS = {"soccer", "rugby", "cricket"}


class MarketType(str, Enum):
    MONEYLINE = "moneyline"
    SPREAD = "spread"
    TOTAL = "total"
    PLAYER_PROP = "player_prop"


class Side(str, Enum):
    HOME = "home"
    AWAY = "away"
    OVER = "over"
    UNDER = "under"
    DRAW = "draw"


class MarketSource(str, Enum):
    LABELED = "labeled"
    INFERRED = "inferred"
    MANUAL = "manual"


@dataclass(frozen=True)
class GameContext:
    home_team: str
    away_team: str
    sport: str
    game_id: Optional[str] = None

    @property
    def ref(self) -> str:
        if self.game_id:
            return self.game_id
        return f"{self.sport}:{self.away_team}@{self.home_team}".lower().replace(" ", "-")

    @property
    def supports_draws(self) -> bool:
        return self.sport.strip().lower() in DRAW_SPORTS

    def team_for(self, side: Side) -> Optional[str]:
        if side == Side.HOME:
            return self.home_team
        if side == Side.AWAY:
            return self.away_team
        return None


@dataclass(frozen=True)
class Pick:
    game_ref: str
    market_type: MarketType
    side: Side
    price_american: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    stake: Optional[float] = None
    note: Optional[str] = None
    team_name: Optional[str] = None
    line: Optional[float] = None
    player_name: Optional[str] = None
    prop_type: Optional[str] = None
    confidence: float = 1.0
    market_source: MarketSource = MarketSource.MANUAL

    def __post_init__(self):
        if not isinstance(self.price_american, str) or not AMERICAN_PRICE_RE.match(self.price_american):
            raise ValueError(f"price_american must look like +150 or -110, got {self.price_american!r}")
        if int(self.price_american[1:]) == 0:
            raise ValueError("price_american cannot be zero")
        if self.stake is not None and self.stake < 0:
            raise ValueError("stake cannot be negative")

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.game_ref, self.market_type.value, self.side.value)

    @property
    def display_text(self) -> str:
        odds = self.price_american
        side_label = self.side.value.capitalize()
        if self.market_type == MarketType.MONEYLINE:
            team = self.team_name if self.side != Side.DRAW and self.team_name else side_label
            return f"{team} ML ({odds})"
        if self.market_type == MarketType.SPREAD:
            team = self.team_name or side_label
            if self.line is None:
                return f"{team} ({odds})"
            return f"{team} {self.line:+g} ({odds})"
        if self.market_type == MarketType.TOTAL:
            line = f" {self.line:g}" if self.line is not None else ""
            return f"{side_label}{line} ({odds})"
        if self.player_name:
            line = f" {self.line:g}" if self.line is not None else ""
            who = f"{self.player_name} {self.prop_type}" if self.prop_type else self.player_name
            return f"{who} {side_label}{line} ({odds})"
        return f"Player Prop ({odds})"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["market_type"] = self.market_type.value
        data["side"] = self.side.value
        data["market_source"] = self.market_source.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pick":
        return cls(
            id=str(data["id"]),
            game_ref=str(data["game_ref"]),
            market_type=MarketType(data["market_type"]),
            side=Side(data["side"]),
            price_american=str(data["price_american"]),
            stake=float(data["stake"]) if data.get("stake") is not None else None,
            note=data.get("note"),
            team_name=data.get("team_name"),
            line=float(data["line"]) if data.get("line") is not None else None,
            player_name=data.get("player_name"),
            prop_type=data.get("prop_type"),
            confidence=float(data.get("confidence", 1.0)),
            market_source=MarketSource(data.get("market_source", MarketSource.MANUAL.value)),
        )


@dataclass(frozen=True)
class ManualSelection:
    market_type: MarketType
    side: Side
    price_american: str
    team_name: Optional[str] = None
    line: Optional[float] = None
    player_name: Optional[str] = None
    prop_type: Optional[str] = None
