"""Outlier removal for produced feature tables."""

import logging
from typing import Iterable, Iterator, Tuple

from tap_features.config import Config
from tap_features.models.keyboard import KeyboardLayout

logger = logging.getLogger(__name__)


def is_outlier(
    x: float, y: float, key_center: Tuple[float, float], tolerance: float
) -> bool:
    """True if (x, y) falls outside the square of half-side ``tolerance`` around the centre."""
    cx, cy = key_center
    return x < cx - tolerance or x > cx + tolerance or y < cy - tolerance or y > cy + tolerance


def filter_outliers(
    lines: Iterable[str],
    keyboard: KeyboardLayout,
    tolerance: float = Config.outlier_tolerance,
    delimiter: str = ",",
) -> Iterator[str]:
    """
    Drop taps that land too far from the centre of their intended key.

    Args:
        lines: Feature table lines, header first.
        keyboard: Layout the taps were recorded on.
        tolerance: Allowed distance from the key centre, in key heights.
        delimiter: Column delimiter of the table.

    Yields:
        The header line followed by every retained row, without newlines.
    """
    lines = iter(lines)
    header_line = next(lines, None)
    if header_line is None:
        return
    header_line = header_line.rstrip("\r\n")
    yield header_line

    header = [h.strip() for h in header_line.split(delimiter)]
    x_index = header.index("xkeyboard")
    y_index = header.index("ykeyboard")
    key_index = header.index("key")
    limit = keyboard.params.keyheight * tolerance

    kept = dropped = unknown = 0
    for line in lines:
        line = line.rstrip("\r\n")
        if not line:
            continue
        tokens = [t.strip() for t in line.split(delimiter)]
        key = tokens[key_index] or " "
        if key not in keyboard:
            unknown += 1
            continue
        x, y = float(tokens[x_index]), float(tokens[y_index])
        if is_outlier(x, y, keyboard.relative_center(key), limit):
            dropped += 1
            continue
        kept += 1
        yield line

    if unknown:
        logger.warning("Dropped %d rows with keys missing from the layout", unknown)
    logger.info("Kept %d rows, dropped %d outliers", kept, dropped)
