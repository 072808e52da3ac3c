"""Frequent letter n-gram dictionaries and their indicator vectors."""

import logging
from pathlib import Path
from typing import Iterable, List, Tuple

import numpy as np
import yaml

from tap_features.errors import ConfigurationError

logger = logging.getLogger(__name__)


class NgramDictionary:
    """
    Ordered set of frequent letter sequences of one length.

    Each sequence owns a fixed slot, so indicator vectors always follow
    the order the dictionary was loaded in.  The dictionary itself holds
    no indicator state; :meth:`indicators` builds a fresh array per call.
    """

    def __init__(self, keys: Iterable[str]):
        # dict.fromkeys drops duplicates and keeps first-seen order.
        self.keys: Tuple[str, ...] = tuple(dict.fromkeys(keys))
        self._slots = {key: slot for slot, key in enumerate(self.keys)}

    def __len__(self) -> int:
        return len(self.keys)

    def indicators(self, letters: str) -> np.ndarray:
        """One-hot vector marking ``letters`` if it is a frequent sequence."""
        vector = np.zeros(len(self.keys), dtype=np.int64)
        slot = self._slots.get(letters)
        if slot is not None:
            vector[slot] = 1
        return vector


def _sequences(entries, name: str) -> List[str]:
    """Extract the letter sequences from ``[[seq, freq], ...]`` or ``{seq: freq}``."""
    if isinstance(entries, dict):
        return [str(k) for k in entries]
    if not isinstance(entries, list):
        raise ConfigurationError(
            f"Expected a list of [letters, frequency] pairs for {name!r}, "
            f"got {type(entries).__name__}"
        )
    sequences = []
    for entry in entries:
        if isinstance(entry, (list, tuple)) and entry:
            sequences.append(str(entry[0]))
        else:
            raise ConfigurationError(f"Malformed {name!r} entry: {entry!r}")
    return sequences


def _section(data: dict, name: str):
    """Look up ``name`` or its symbol-style spelling ``:name``."""
    for key in (name, ":" + name):
        if key in data:
            return data[key]
    raise KeyError(name)


def load_ngram_dictionaries(path: str) -> Tuple[NgramDictionary, NgramDictionary]:
    """
    Load the bigram and trigram dictionaries from a corpus summary.

    The file is a YAML (or JSON) mapping with ``biletters`` and
    ``triletters`` entries, each an ordered list of ``[letters,
    frequency]`` pairs.  Keys written as symbols (``:biletters``) are
    accepted too.  Frequencies are ignored.

    Returns:
        ``(bigrams, trigrams)``.
    """
    with open(Path(path), "r") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse n-gram file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping in {path}, got {type(data).__name__}"
        )
    sections = {}
    missing = []
    for name in ("biletters", "triletters"):
        try:
            sections[name] = _section(data, name)
        except KeyError:
            missing.append(name)
    if missing:
        raise ConfigurationError(f"{path} is missing keys: {', '.join(missing)}")

    bigrams = NgramDictionary(_sequences(sections["biletters"], "biletters"))
    trigrams = NgramDictionary(_sequences(sections["triletters"], "triletters"))
    logger.info(
        "Loaded %d bigrams and %d trigrams from %s",
        len(bigrams),
        len(trigrams),
        Path(path).name,
    )
    return bigrams, trigrams
