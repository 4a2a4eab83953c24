import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from config import Config
from models.tokens import ClassifiedToken, FocalPoint, TokenCluster

logger = logging.getLogger("clustering")


def _centers(tokens: Sequence[ClassifiedToken]) -> np.ndarray:
    return np.array([t.box.center for t in tokens], dtype=float).reshape(-1, 2)


def _within(tokens: Sequence[ClassifiedToken], focal: FocalPoint, radius: float) -> List[Tuple[ClassifiedToken, float]]:
    if not tokens:
        return []
    centers = _centers(tokens)
    dists = np.hypot(centers[:, 0] - focal.x, centers[:, 1] - focal.y)
    return [(tok, float(d)) for tok, d in zip(tokens, dists) if d <= radius]


def reading_order(hits: Sequence[Tuple[ClassifiedToken, float]]) -> List[ClassifiedToken]:
    """Sort (token, distance) pairs row by row, left to right."""
    if not hits:
        return []
    heights = np.array([max(tok.box.height, 1.0) for tok, _ in hits])
    line_height = float(np.median(heights))

    by_y = sorted(hits, key=lambda h: (h[0].box.center[1], h[0].box.left, h[1], h[0].text))
    keyed = []
    row = 0
    row_anchor = by_y[0][0].box.center[1]
    for tok, dist in by_y:
        cy = tok.box.center[1]
        if cy - row_anchor > line_height:
            row += 1
            row_anchor = cy
        keyed.append(((row, tok.box.left, dist, tok.text), tok))
    keyed.sort(key=lambda k: k[0])
    return [tok for _, tok in keyed]


def cluster(
    tokens: Sequence[ClassifiedToken],
    focal: FocalPoint,
    radius: Optional[float] = None,
    config: Optional[Config] = None,
) -> TokenCluster:
    """Tokens around the focal point in reading order.

    An empty result is a normal outcome: the caller reports it as a failed
    extraction.
    """
    if tokens is None or focal is None:
        raise TypeError("tokens and focal are required")
    config = config or Config()
    radius = config.cluster_radius if radius is None else radius

    hits = _within(tokens, focal, radius)
    expanded = False
    if not hits:
        radius = radius * config.radius_expansion_factor
        expanded = True
        hits = _within(tokens, focal, radius)
        logger.debug(f"Nothing near ({focal.x:.0f}, {focal.y:.0f}); retried at radius {radius:.0f}")

    ordered = reading_order(hits)
    if not ordered:
        logger.info(f"No tokens within {radius:.0f}px of ({focal.x:.0f}, {focal.y:.0f})")
    elif config.debug_logging:
        logger.debug("Cluster: " + " | ".join(t.text for t in ordered))
    return TokenCluster(focal=focal, radius=radius, tokens=tuple(ordered), expanded=expanded)
