"""Configuration for tap feature extraction."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class DataFormat(str, Enum):
    """Raw capture formats understood by the pipeline."""

    # Phrase-position logs with tap and word-completion rows.
    A = "a"
    # Posture-coded logs holding only tap-down rows.
    B = "b"


@dataclass
class Config:
    """Pipeline configuration."""

    # Input
    data_format: DataFormat = DataFormat.A

    # Keyboard layout
    min_layout_keys: int = 27

    # Letter history
    history_sentinel: str = "#"

    # Format B posture code -> inputting finger
    finger_codes: Dict[int, str] = field(
        default_factory=lambda: {1: "I", 2: "TT", 3: "T"}
    )

    # Output
    output_delimiter: str = ","

    # Outlier filtering, in multiples of the key height
    outlier_tolerance: float = 1.5
