"""Per-trial tap sequence processing.

Consumes normalized event records in log order and turns every tap-down
event into a feature row.  A tap that directly follows the previous tap
of the same trial also gets travel deltas, the hand-crossing flag and
letter n-gram indicators.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

import numpy as np

from tap_features.config import Config, DataFormat
from tap_features.data.ngrams import NgramDictionary
from tap_features.data.parsers import ACTION_DOWN, EventRecord
from tap_features.errors import FormatError
from tap_features.models.keyboard import KeyboardLayout

logger = logging.getLogger(__name__)

BASE_COLUMNS = [
    "line_num",
    "inputing_finger",
    "user_id",
    "trial_index",
    "key",
    "xkeyboard",
    "ykeyboard",
    "systime",
]

DELTA_COLUMNS = ["xtravel", "ytravel", "down_time_elapse", "lr"]


@dataclass(frozen=True)
class TrialContext:
    """The previous tap of the current trial plus the recent letters."""

    letter_history: str
    user_id: Optional[int] = None
    task_type: Optional[int] = None
    trial_index: Optional[int] = None
    pos_char_onphrase: Optional[int] = None
    xkeyboard: Optional[float] = None
    ykeyboard: Optional[float] = None
    systime: Optional[int] = None

    @classmethod
    def initial(cls, sentinel: str = "#") -> "TrialContext":
        return cls(letter_history=sentinel * 3)

    @property
    def is_idle(self) -> bool:
        return self.user_id is None

    def same_trial(self, record: EventRecord) -> bool:
        return not self.is_idle and record.trial == (
            self.user_id,
            self.task_type,
            self.trial_index,
        )


def letter_indicators(
    history: str, bigrams: NgramDictionary, trigrams: NgramDictionary
) -> np.ndarray:
    """Bigram indicators for the last two letters, then trigram ones for the last three."""
    return np.concatenate(
        [bigrams.indicators(history[-2:]), trigrams.indicators(history[-3:])]
    )


def advance(
    context: TrialContext,
    record: Optional[EventRecord],
    line_number: int,
    keyboard: KeyboardLayout,
    bigrams: NgramDictionary,
    trigrams: NgramDictionary,
    data_format: DataFormat,
    sentinel: str = "#",
) -> Tuple[TrialContext, Optional[List]]:
    """
    Process one record against the current trial context.

    Args:
        context: State left by the previous record.
        record: The next record, or None to signal the end of the data.
        line_number: 1-based line number of the record in the raw log.
        keyboard: Layout used for the hand-crossing flag.
        bigrams: Frequent two-letter sequences.
        trigrams: Frequent three-letter sequences.
        data_format: Format the record was parsed from.
        sentinel: Filler character for letters not seen yet.

    Returns:
        ``(new_context, row)`` where row is None when nothing is emitted.

    Raises:
        FormatError: if the record is not a tap event.
    """
    if record is None:
        return TrialContext.initial(sentinel), None

    if not record.is_tap_format:
        raise FormatError(f"Line {line_number} is not in tap input data format")

    if record.action_type != ACTION_DOWN or not record.key:
        return context, None

    same_trial = context.same_trial(record)
    if data_format == DataFormat.A:
        is_next_key = same_trial and record.pos_char_onphrase == context.pos_char_onphrase + 1
    else:
        is_next_key = same_trial

    history = context.letter_history
    if is_next_key:
        history = history[1:] + record.key
    elif not same_trial:
        history = sentinel * 2 + record.key

    row = [
        line_number,
        record.inputting_finger,
        record.user_id,
        record.trial_index,
        record.key,
        record.xkeyboard,
        record.ykeyboard,
        record.systime,
    ]
    if is_next_key:
        row.append(record.xkeyboard - context.xkeyboard)
        row.append(record.ykeyboard - context.ykeyboard)
        row.append(record.systime - context.systime)
        crosses = keyboard.crosses_hands(
            context.xkeyboard, context.ykeyboard, record.xkeyboard, record.ykeyboard
        )
        row.append(1 if crosses else 0)
        row.extend(letter_indicators(history, bigrams, trigrams).tolist())

    new_context = replace(
        context,
        letter_history=history,
        user_id=record.user_id,
        task_type=record.task_type,
        trial_index=record.trial_index,
        pos_char_onphrase=record.pos_char_onphrase,
        xkeyboard=record.xkeyboard,
        ykeyboard=record.ykeyboard,
        systime=record.systime,
    )
    return new_context, row


class TapSequenceProcessor:
    """
    Stateful wrapper around :func:`advance` for one ordered log.

    Example::

        processor = TapSequenceProcessor(keyboard, bigrams, trigrams, config)
        for number, record in records:
            row = processor.process(record, number)
        processor.process(None, 0)  # end of data
    """

    def __init__(
        self,
        keyboard: KeyboardLayout,
        bigrams: NgramDictionary,
        trigrams: NgramDictionary,
        config: Optional[Config] = None,
    ):
        self.keyboard = keyboard
        self.bigrams = bigrams
        self.trigrams = trigrams
        self.config = config or Config()
        self.data_format = DataFormat(self.config.data_format)
        self.context = TrialContext.initial(self.config.history_sentinel)

    @property
    def num_columns(self) -> int:
        """Width of a row that carries the delta and indicator block."""
        return (
            len(BASE_COLUMNS) + len(DELTA_COLUMNS) + len(self.bigrams) + len(self.trigrams)
        )

    def header(self) -> List[str]:
        return BASE_COLUMNS + DELTA_COLUMNS + list(self.bigrams.keys) + list(self.trigrams.keys)

    def reset(self) -> None:
        self.context = TrialContext.initial(self.config.history_sentinel)

    def process(self, record: Optional[EventRecord], line_number: int) -> Optional[List]:
        """Feed one record; returns its feature row or None."""
        self.context, row = advance(
            self.context,
            record,
            line_number,
            self.keyboard,
            self.bigrams,
            self.trigrams,
            self.data_format,
            self.config.history_sentinel,
        )
        return row
