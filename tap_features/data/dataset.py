"""Torch dataset over produced feature tables, for classifier training."""

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import torch
from torch.utils.data import Dataset

from tap_features.config import Config

logger = logging.getLogger(__name__)

# Columns before the delta block that are used as features.
POSITION_COLUMNS = ["xkeyboard", "ykeyboard"]
FIRST_DELTA_COLUMN = "xtravel"


class FeatureTableDataset(Dataset):
    """
    Dataset of tap feature rows labelled by inputting finger.

    Only rows that carry the full delta and letter-indicator block are
    kept; the first tap of a trial has no deltas and is skipped, as are
    rows without a finger label.  Each item holds::

        features: (num_features,) float32
                  [xkeyboard, ykeyboard, xtravel, ytravel,
                   down_time_elapse, lr, indicators...]
        label:    index of the finger in ``classes``
        user_id:  int
        line_num: int
    """

    def __init__(self, data_path: str, config: Optional[Config] = None):
        self.config = config or Config()
        self.header: List[str] = []
        self.items: List[Dict] = []

        data_path = Path(data_path)
        if data_path.is_file():
            csv_files = [data_path]
        else:
            csv_files = sorted(data_path.glob("*.csv"))

        if not csv_files:
            raise FileNotFoundError(f"No CSV files found at {data_path}")

        rows: List[List[str]] = []
        for csv_file in csv_files:
            rows.extend(self._load_csv(csv_file))

        self.classes: List[str] = sorted({row[self._finger_index] for row in rows})
        class_index = {name: i for i, name in enumerate(self.classes)}

        for row in rows:
            features = np.array(
                [float(row[i]) for i in self._feature_indices], dtype=np.float32
            )
            self.items.append(
                {
                    "features": torch.from_numpy(features),
                    "label": torch.tensor(class_index[row[self._finger_index]], dtype=torch.long),
                    "user_id": int(row[self._user_index]),
                    "line_num": int(row[self._line_index]),
                }
            )

        logger.info(
            "Loaded %d feature rows (%d classes) from %d files",
            len(self.items),
            len(self.classes),
            len(csv_files),
        )

    def _load_csv(self, csv_path: Path) -> List[List[str]]:
        """Read one feature table and return its complete, labelled rows."""
        with open(csv_path, "r", newline="") as f:
            reader = csv.reader(f, delimiter=self.config.output_delimiter)
            header = next(reader, None)
            if header is None:
                return []
            header = [h.strip() for h in header]
            if not self.header:
                self._set_header(header)
            elif header != self.header:
                raise ValueError(f"Header of {csv_path} does not match earlier files")

            kept = [
                row
                for row in reader
                if len(row) == len(self.header) and row[self._finger_index].strip()
            ]
        return kept

    def _set_header(self, header: List[str]) -> None:
        required = {"line_num", "inputing_finger", "user_id", FIRST_DELTA_COLUMN}
        required.update(POSITION_COLUMNS)
        missing = required.difference(header)
        if missing:
            raise ValueError(f"Feature table is missing columns {sorted(missing)}")

        self.header = header
        self._finger_index = header.index("inputing_finger")
        self._user_index = header.index("user_id")
        self._line_index = header.index("line_num")
        first_delta = header.index(FIRST_DELTA_COLUMN)
        self._feature_indices = [header.index(c) for c in POSITION_COLUMNS] + list(
            range(first_delta, len(header))
        )

    @property
    def num_features(self) -> int:
        return len(self._feature_indices) if self.header else 0

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, idx: int) -> Dict:
        return self.items[idx]


def collate_features(batch: List[Dict]) -> Dict:
    """Stack feature rows into ``(batch, num_features)`` and ``(batch,)`` tensors."""
    return {
        "features": torch.stack([item["features"] for item in batch]),
        "labels": torch.stack([item["label"] for item in batch]),
        "user_ids": torch.tensor([item["user_id"] for item in batch], dtype=torch.long),
    }
