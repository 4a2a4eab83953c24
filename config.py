import os
from dataclasses import dataclass, field
from typing import List


@dataclass
class Config:
    # Classification
    ocr_confidence_threshold: float = 0.4
    adjacency_gap_factor: float = 1.5

    # Clustering
    cluster_radius: float = 100.0
    radius_expansion_factor: float = 2.0

    # Resolution
    team_match_threshold: float = 80.0
    review_confidence_threshold: float = 0.6

    # Recognition adapter
    tesseract_config: str = r"--oem 3 --psm 11"

    # HTTP
    http_timeout: float = 10.0

    # Debug
    debug_logging: bool = False

    # Soccer competitions
    soccer_competitions: List[str] = field(default_factory=lambda: [
        "ENG.1", "ESP.1", "ITA.1", "GER.1", "FRA.1", "USA.1"
    ])

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            ocr_confidence_threshold=float(os.environ.get("OCR_CONF", "0.4")),
            adjacency_gap_factor=float(os.environ.get("ADJACENCY_GAP", "1.5")),
            cluster_radius=float(os.environ.get("CLUSTER_RADIUS", "100")),
            radius_expansion_factor=float(os.environ.get("RADIUS_EXPANSION", "2.0")),
            team_match_threshold=float(os.environ.get("TEAM_MATCH_MIN", "80")),
            review_confidence_threshold=float(os.environ.get("REVIEW_CONF", "0.6")),
            tesseract_config=os.environ.get("TESSERACT_CONFIG", r"--oem 3 --psm 11"),
            http_timeout=float(os.environ.get("HTTP_TIMEOUT", "10")),
            debug_logging=os.environ.get("DEBUG_LOGGING", "false").lower() == "true",
        )
