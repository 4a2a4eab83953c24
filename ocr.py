import logging
from typing import Any, Dict, Iterable, List, Optional

import cv2
import numpy as np
import pytesseract

from config import Config
from models.tokens import Rect, TextToken

logger = logging.getLogger("ocr")


def preprocess_for_ocr(image_bytes: bytes) -> np.ndarray:
    """Grayscale, denoise and binarize. Geometry is left untouched so boxes stay
    in the same pixel space as the user's focal point."""
    np_data = np.frombuffer(image_bytes, np.uint8)
    img = cv2.imdecode(np_data, cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError("Failed to decode image bytes.")

    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    gray = cv2.fastNlMeansDenoising(gray, h=10, templateWindowSize=7, searchWindowSize=21)
    gray = cv2.equalizeHist(gray)
    return cv2.adaptiveThreshold(
        gray, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C, cv2.THRESH_BINARY, 31, 8
    )


def _conf(raw: Any) -> float:
    try:
        value = float(str(raw).strip())
    except ValueError:
        return -1.0
    return value


def tokens_from_tesseract_data(data: Dict[str, List[Any]]) -> List[TextToken]:
    """Convert pytesseract.image_to_data(..., output_type=DICT) into word tokens.

    Tesseract reports confidence as 0-100 with -1 for layout rows; those rows
    and empty words are dropped.
    """
    tokens: List[TextToken] = []
    for i in range(len(data.get("text", []))):
        text = str(data["text"][i]).strip()
        conf = _conf(data["conf"][i])
        if not text or conf < 0:
            continue
        box = Rect(
            left=float(data["left"][i]),
            top=float(data["top"][i]),
            width=float(data["width"][i]),
            height=float(data["height"][i]),
        )
        tokens.append(TextToken(text=text, bounding_box=box, confidence=min(conf / 100.0, 1.0)))
    return tokens


def tokens_from_easyocr(results: Iterable[Any]) -> List[TextToken]:
    """Convert EasyOCR readtext() triples (quad, text, confidence 0-1)."""
    tokens: List[TextToken] = []
    for quad, text, conf in results:
        text = str(text).strip()
        if not text:
            continue
        xs = [float(p[0]) for p in quad]
        ys = [float(p[1]) for p in quad]
        box = Rect(left=min(xs), top=min(ys), width=max(xs) - min(xs), height=max(ys) - min(ys))
        tokens.append(TextToken(text=text, bounding_box=box, confidence=float(conf)))
    return tokens


def recognize_tokens(image_bytes: bytes, config: Optional[Config] = None) -> List[TextToken]:
    config = config or Config()
    image = preprocess_for_ocr(image_bytes)
    data = pytesseract.image_to_data(image, output_type=pytesseract.Output.DICT, config=config.tesseract_config)
    tokens = tokens_from_tesseract_data(data)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("OCR tokens: " + " | ".join(f"{t.text}({t.confidence:.2f})" for t in tokens))
    return tokens
