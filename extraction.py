import logging
from typing import Optional, Sequence

from classifier import classify
from clustering import cluster
from config import Config
from errors import NoPriceFound, Result
from models.pick import GameContext, Pick
from models.tokens import FocalPoint, TextToken
from resolver import resolve

logger = logging.getLogger("extraction")


def extract_pick(
    tokens: Sequence[TextToken],
    focal: FocalPoint,
    game: GameContext,
    config: Optional[Config] = None,
) -> Result[Pick]:
    """classify -> cluster -> resolve for one captured region.

    Each call is independent; nothing is shared between runs.
    """
    config = config or Config()
    classified = classify(tokens, config)
    near = cluster(classified, focal, config=config)
    if near.empty:
        return Result.failure(NoPriceFound("no text near the selected point"))

    result = resolve(near, game, config)
    if result.ok:
        logger.info(f"Extracted {result.value.display_text} (confidence {result.value.confidence:.2f})")
    else:
        logger.info(f"Extraction failed at ({focal.x:.0f}, {focal.y:.0f}): {result.error}")
    return result
