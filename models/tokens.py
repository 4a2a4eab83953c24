import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2.0, self.top + self.height / 2.0)

    def distance_to(self, x: float, y: float) -> float:
        cx, cy = self.center
        return math.hypot(cx - x, cy - y)

    def center_distance(self, other: "Rect") -> float:
        ox, oy = other.center
        return self.distance_to(ox, oy)

    def same_row(self, other: "Rect") -> bool:
        """Vertical centers within half a line height of each other."""
        line = max(self.height, other.height, 1.0)
        return abs(self.center[1] - other.center[1]) <= line / 2.0

    def horizontal_gap(self, other: "Rect") -> float:
        if other.left >= self.right:
            return other.left - self.right
        if self.left >= other.right:
            return self.left - other.right
        return 0.0

    def adjacent_to(self, other: "Rect", gap_factor: float = 1.5) -> bool:
        if not self.same_row(other):
            return False
        line = max(self.height, other.height, 1.0)
        return self.horizontal_gap(other) <= gap_factor * line


@dataclass(frozen=True)
class FocalPoint:
    x: float
    y: float


@dataclass(frozen=True)
class TextToken:
    text: str
    bounding_box: Rect
    confidence: float


class TokenRole(str, Enum):
    NUMBER = "number"
    ODDS = "odds"
    TEAM_NAME = "team_name"
    MARKET_LABEL = "market_label"
    NOISE = "noise"


@dataclass(frozen=True)
class ClassifiedToken:
    token: TextToken
    role: TokenRole
    normalized: str

    @property
    def text(self) -> str:
        return self.token.text

    @property
    def box(self) -> Rect:
        return self.token.bounding_box

    @property
    def confidence(self) -> float:
        return self.token.confidence


@dataclass(frozen=True)
class TokenCluster:
    focal: FocalPoint
    radius: float
    tokens: Tuple[ClassifiedToken, ...] = field(default_factory=tuple)
    expanded: bool = False

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def empty(self) -> bool:
        return not self.tokens

    def with_role(self, role: TokenRole) -> Tuple[ClassifiedToken, ...]:
        return tuple(t for t in self.tokens if t.role == role)

    def distance(self, token: ClassifiedToken) -> float:
        return token.box.distance_to(self.focal.x, self.focal.y)
