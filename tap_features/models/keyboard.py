"""Keyboard geometry: key hit boxes and keyboard halves."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from tap_features.config import Config
from tap_features.errors import ConfigurationError

logger = logging.getLogger(__name__)

REQUIRED_PARAMS = ("width", "xoffset", "yoffset", "hmargin", "vmargin", "keyheight")
KEY_SIDES = ("left", "right", "top", "bottom")


@dataclass(frozen=True)
class LayoutParams:
    """Global layout scalars shared by every key."""

    width: float
    xoffset: float
    yoffset: float
    hmargin: float
    vmargin: float
    keyheight: float

    @classmethod
    def from_mapping(cls, values: Dict[str, float]) -> "LayoutParams":
        missing = [name for name in REQUIRED_PARAMS if name not in values]
        if missing:
            raise ConfigurationError(
                f"Keyboard layout is missing parameters: {', '.join(missing)}"
            )
        ignored = sorted(set(values).difference(REQUIRED_PARAMS))
        if ignored:
            logger.debug("Ignoring layout parameters: %s", ", ".join(ignored))
        return cls(**{name: values[name] for name in REQUIRED_PARAMS})


@dataclass(frozen=True)
class KeyBounds:
    """Hit box of one key in raw keyboard coordinates."""

    left: float
    right: float
    top: float
    bottom: float


def _parse_assignments(tokens: Iterable[str], line_number: int) -> Dict[str, float]:
    """Parse ``name=value`` tokens into a dict of floats."""
    values = {}
    for token in tokens:
        name, sep, raw = token.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ConfigurationError(
                f"Line {line_number}: expected name=value, got {token!r}"
            )
        try:
            values[name] = float(raw.strip())
        except ValueError:
            raise ConfigurationError(
                f"Line {line_number}: {name} is not a number: {raw.strip()!r}"
            ) from None
    return values


class KeyboardLayout:
    """
    Keyboard layout parsed from a comma-separated description.

    Each non-comment line is either a parameter line, whose first token
    is longer than one character::

        width=720, xoffset=0, yoffset=360, hmargin=6, vmargin=12, keyheight=90

    or a key line with exactly five tokens::

        q, left=3, right=69, top=376, bottom=466

    An empty key label denotes the space bar.  Query coordinates are
    relative to the keyboard, so ``in_bounds`` and ``relative_center``
    shift by the global offsets before comparing against the raw boxes.
    """

    def __init__(self, lines: Iterable[str], config: Optional[Config] = None):
        self.config = config or Config()
        param_values: Dict[str, float] = {}
        self._keys: Dict[str, KeyBounds] = {}

        for line_number, line in enumerate(lines, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            tokens = [t.strip() for t in stripped.split(",")]
            if len(tokens[0]) > 1:
                param_values.update(_parse_assignments(tokens, line_number))
            elif len(tokens) == 5:
                sides = _parse_assignments(tokens[1:], line_number)
                missing = [s for s in KEY_SIDES if s not in sides]
                if missing:
                    raise ConfigurationError(
                        f"Line {line_number}: key {tokens[0]!r} is missing "
                        f"sides: {', '.join(missing)}"
                    )
                label = tokens[0] or " "
                self._keys[label] = KeyBounds(**{s: sides[s] for s in KEY_SIDES})

        if len(self._keys) < self.config.min_layout_keys:
            raise ConfigurationError(
                f"Not enough keys: layout defines {len(self._keys)}, "
                f"at least {self.config.min_layout_keys} required"
            )
        self.params = LayoutParams.from_mapping(param_values)

        logger.info(
            "Loaded keyboard layout with %d keys (width %.1f)",
            len(self._keys),
            self.params.width,
        )

    @classmethod
    def from_file(cls, path: str, config: Optional[Config] = None) -> "KeyboardLayout":
        with open(Path(path), "r") as f:
            return cls(f, config)

    @property
    def keys(self) -> List[str]:
        return list(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    # ------------------------------------------------------------------
    # Keyboard halves
    # ------------------------------------------------------------------

    def is_left_half(self, x: float) -> bool:
        return x < self.params.width / 2

    def is_right_half(self, x: float) -> bool:
        return not self.is_left_half(x)

    def crosses_hands(self, x1: float, y1: float, x2: float, y2: float) -> bool:
        """True if the two points lie on opposite halves of the keyboard."""
        return (self.is_left_half(x1) and self.is_right_half(x2)) or (
            self.is_left_half(x2) and self.is_right_half(x1)
        )

    # ------------------------------------------------------------------
    # Key hit boxes
    # ------------------------------------------------------------------

    def in_bounds(self, key: str, x: float, y: float) -> bool:
        """
        Check whether a keyboard-relative point hits ``key``.

        The hit box is widened by half the horizontal and vertical
        margins on each side.  Unknown keys never match.
        """
        bounds = self._keys.get(key)
        if bounds is None:
            return False
        p = self.params
        x += p.xoffset
        y += p.yoffset
        return (
            bounds.left - p.hmargin / 2 <= x <= bounds.right + p.hmargin / 2
            and bounds.top - p.vmargin / 2 <= y <= bounds.bottom + p.vmargin / 2
        )

    def relative_center(self, key: str) -> Tuple[float, float]:
        """Centre of ``key`` in keyboard-relative coordinates."""
        bounds = self._keys.get(key)
        if bounds is None:
            raise KeyError(f"Key {key!r} is not in the keyboard layout")
        return (
            (bounds.left + bounds.right) / 2 - self.params.xoffset,
            (bounds.top + bounds.bottom) / 2 - self.params.yoffset,
        )

    def relative_bounds(self) -> List[Tuple[str, float, float, float, float, float, float]]:
        """
        Key boxes in keyboard-relative coordinates.

        Returns:
            One ``(key, top, right, bottom, left, xcenter, ycenter)`` tuple
            per key, in layout order.
        """
        xoff, yoff = self.params.xoffset, self.params.yoffset
        table = []
        for key, b in self._keys.items():
            xcenter, ycenter = self.relative_center(key)
            table.append(
                (key, b.top - yoff, b.right - xoff, b.bottom - yoff, b.left - xoff,
                 xcenter, ycenter)
            )
        return table
