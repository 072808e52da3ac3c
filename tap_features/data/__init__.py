"""Raw log parsing and n-gram dictionaries.

The torch feature-table dataset lives in ``tap_features.data.dataset``
and is imported from there directly.
"""

from tap_features.data.ngrams import NgramDictionary, load_ngram_dictionaries
from tap_features.data.parsers import (
    EventRecord,
    FormatAParser,
    FormatBParser,
    LineParser,
    get_parser,
)

__all__ = [
    "EventRecord",
    "FormatAParser",
    "FormatBParser",
    "LineParser",
    "NgramDictionary",
    "get_parser",
    "load_ngram_dictionaries",
]
