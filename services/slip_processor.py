import logging
from typing import Optional

from config import Config
from errors import Result
from extraction import extract_pick
from models.pick import GameContext, Pick
from models.tokens import FocalPoint
from ocr import recognize_tokens
from slip import PickSlip

logger = logging.getLogger("slip_processor")


def parse_capture(img_bytes: bytes, focal: FocalPoint, game: GameContext, config: Optional[Config] = None) -> Result[Pick]:
    config = config or Config()
    tokens = recognize_tokens(img_bytes, config)
    return extract_pick(tokens, focal, game, config)


def add_capture_to_slip(
    slip: PickSlip,
    img_bytes: bytes,
    focal: FocalPoint,
    game: GameContext,
    config: Optional[Config] = None,
) -> Result[Pick]:
    """Extract a pick from a capture and put it on the slip.

    Extraction and duplicate failures come back as results; the caller falls
    back to manual entry or shows a notice.
    """
    result = parse_capture(img_bytes, focal, game, config)
    if not result.ok:
        return result
    added = slip.add(result.value)
    if added.ok:
        logger.info(f"Slip now has {len(slip)} legs")
    return added
