import math
import re

from errors import FormatError, Result

_AMERICAN_RE = re.compile(r"^([+-])(\d+)$")

MIN_MAGNITUDE = 100


def _round_half_away(x: float) -> int:
    # Float noise like 109.99999999999999 must not decide the rounding direction.
    x = round(x, 6)
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def to_decimal(american: str) -> Result[float]:
    """Convert an American price ("+150", "-110") to decimal odds.

    Returns a FormatError result for anything that is not a signed integer with
    magnitude of at least 100.
    """
    if not isinstance(american, str):
        return Result.failure(FormatError(str(american), "price must be text"))
    m = _AMERICAN_RE.match(american.strip())
    if not m:
        return Result.failure(FormatError(american))
    sign, digits = m.groups()
    magnitude = int(digits)
    if magnitude < MIN_MAGNITUDE:
        return Result.failure(FormatError(american, f"magnitude must be at least {MIN_MAGNITUDE}"))
    if sign == "+":
        return Result.success(1.0 + magnitude / 100.0)
    return Result.success(1.0 + 100.0 / magnitude)


def to_american(decimal: float) -> str:
    """Display-only reverse mapping. Never feed the result back into compounding."""
    if decimal is None or not math.isfinite(decimal) or decimal <= 1.0:
        raise ValueError(f"decimal odds must be greater than 1.0, got {decimal!r}")
    if decimal >= 2.0:
        return f"+{_round_half_away((decimal - 1.0) * 100.0)}"
    return f"-{_round_half_away(100.0 / (decimal - 1.0))}"


def implied_probability(american: str) -> Result[float]:
    res = to_decimal(american)
    if not res.ok:
        return res
    return Result.success(1.0 / res.value)
