"""
Diagnostic harness for one capture.
Usage:
    python tests/run_slip_intake.py <image_path> <x> <y> <home> <away> <sport>

This will:
- Run OCR on the image into positioned tokens
- Classify the tokens and cluster them around (x, y)
- Resolve the cluster into a Pick against the given game
- Print the pick and the single-leg combined price
"""

import logging
import sys
from pathlib import Path

from classifier import classify
from clustering import cluster
from config import Config
from models.pick import GameContext
from models.tokens import FocalPoint
from ocr import recognize_tokens
from resolver import needs_manual_review, resolve
from slip import PickSlip


def main(image_path: str, x: float, y: float, home: str, away: str, sport: str):
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    config = Config.from_env()
    tokens = recognize_tokens(Path(image_path).read_bytes(), config)

    print("=== TOKENS ===")
    classified = classify(tokens, config)
    for t in classified:
        print(f"{t.text:>14} {t.role.value:<13} conf={t.confidence:.2f} box={t.box}")

    near = cluster(classified, FocalPoint(x, y), config=config)
    print(f"\n=== CLUSTER (radius {near.radius:.0f}, expanded={near.expanded}) ===")
    print(" | ".join(t.text for t in near.tokens) or "<empty>")

    result = resolve(near, GameContext(home_team=home, away_team=away, sport=sport), config)
    print("\n=== PICK ===")
    if not result.ok:
        print(f"Failed: {result.error}")
        return
    pick = result.value
    print(f"{pick.display_text} | {pick.market_source.value} | confidence {pick.confidence:.2f}"
          f"{' (review)' if needs_manual_review(pick, config) else ''}")

    slip = PickSlip()
    slip.add(pick)
    odds = slip.combined_odds()
    print(f"Decimal {odds.decimal_value:.4f} / American {odds.american_display}")


if __name__ == "__main__":
    if len(sys.argv) < 7:
        print("Usage: python tests/run_slip_intake.py <image_path> <x> <y> <home> <away> <sport>")
        sys.exit(1)
    main(sys.argv[1], float(sys.argv[2]), float(sys.argv[3]), sys.argv[4], sys.argv[5], sys.argv[6])
