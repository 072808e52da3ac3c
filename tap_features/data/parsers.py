"""Line parsers for the two raw tap-log formats.

Format A rows carry a phrase and a character position on it, and mix two
layouts: tap rows and word-completion rows.  Format B rows carry a
posture code and a quoted key and only record tap-down events.

Both parsers turn one raw line into an :class:`EventRecord` or ``None``
when the line is incomplete.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from tap_features.config import Config, DataFormat

logger = logging.getLogger(__name__)

NumberedLines = Iterator[Tuple[int, str]]

ACTION_DOWN = "DOWN"


@dataclass
class EventRecord:
    """One normalized log event."""

    inputting_finger: Optional[str]
    user_id: int
    task_type: int
    block_index: int
    trial_index: int
    key: Optional[str]
    xkeyboard: float
    ykeyboard: float
    systime: int
    action_type: str = ACTION_DOWN
    is_tap_format: bool = True
    pos_char_onphrase: int = -1

    # Format A only
    phrase: Optional[str] = None
    index_onstroke: Optional[int] = None
    pos_onphrase: Optional[int] = None
    word: Optional[str] = None
    word_index: Optional[int] = None
    pointer_id: Optional[int] = None
    xscreen: Optional[float] = None
    yscreen: Optional[float] = None
    time: Optional[int] = None
    upnow_time: Optional[int] = None

    @property
    def trial(self) -> Tuple[int, int, int]:
        return (self.user_id, self.task_type, self.trial_index)


def _parse_index(token: str) -> Optional[int]:
    """Strictly parse a non-negative integer made only of ASCII digits."""
    if token.isascii() and token.isdigit():
        return int(token)
    return None


def _is_comment(line: str) -> bool:
    return line.lstrip().startswith("#")


class LineParser:
    """Shared contract of the format parsers."""

    data_format: DataFormat

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def parse_header(self, lines: NumberedLines) -> None:
        """Consume the metadata lines at the start of the log."""
        raise NotImplementedError

    def parse_line(self, line: str) -> Optional[EventRecord]:
        """Parse one line, or return None if it is incomplete."""
        raise NotImplementedError

    def ends_stream(self, line: str) -> bool:
        """Whether a stripped line marks the end of the data."""
        return False


class FormatAParser(LineParser):
    """
    Parser for phrase-position logs.

    Columns::

        finger, user, task, block, trial, phrase, position, <discriminator>,
        [word index,] pointer, xkeyboard, ykeyboard, xscreen, yscreen,
        time, systime, upnow time, action[, _, _, corrected key]

    When the discriminator is a non-negative integer the row is a tap on
    ``phrase[position]``; otherwise it is a word-completion row whose
    discriminator is the completed word, followed by the word index.
    """

    data_format = DataFormat.A

    def parse_header(self, lines: NumberedLines) -> None:
        # Leading comments and blanks, then a single column header line.
        for _, line in lines:
            if line.strip() and not _is_comment(line):
                return

    def parse_line(self, line: str) -> Optional[EventRecord]:
        tokens = [t if t == " " else t.strip() for t in line.rstrip("\r\n").split(",")]
        try:
            return self._build(iter(tokens))
        except StopIteration:
            logger.debug("Too few fields in line: %r", line)
        except ValueError:
            logger.debug("Non-numeric field in line: %r", line)
        return None

    def _build(self, tokens: Iterator[str]) -> Optional[EventRecord]:
        fields: Dict = {}
        finger = next(tokens).upper()
        fields["user_id"] = int(next(tokens))
        fields["task_type"] = int(next(tokens))
        fields["block_index"] = int(next(tokens))
        fields["trial_index"] = int(next(tokens))
        phrase = next(tokens)
        position = int(next(tokens))
        discriminator = next(tokens)

        index_onstroke = _parse_index(discriminator)
        if index_onstroke is not None:
            key = phrase[position] if 0 <= position < len(phrase) else None
            fields.update(
                is_tap_format=True,
                pos_char_onphrase=position,
                index_onstroke=index_onstroke,
                key=key.lower() if key else None,
            )
        else:
            fields.update(
                is_tap_format=False,
                pos_onphrase=position,
                word=discriminator,
                word_index=int(next(tokens)),
                key=None,
            )

        fields["pointer_id"] = int(next(tokens))
        fields["xkeyboard"] = float(next(tokens))
        fields["ykeyboard"] = float(next(tokens))
        fields["xscreen"] = float(next(tokens))
        fields["yscreen"] = float(next(tokens))
        fields["time"] = int(next(tokens))
        fields["systime"] = int(next(tokens))
        fields["upnow_time"] = int(next(tokens))
        fields["action_type"] = next(tokens).upper()

        trailing: List[str] = list(tokens)
        if len(trailing) >= 3:
            corrected = trailing[2]
            fields["key"] = corrected.lower() if corrected else None

        if not finger:
            return None
        return EventRecord(inputting_finger=finger, phrase=phrase, **fields)


class FormatBParser(LineParser):
    """
    Parser for posture-coded tap logs.

    Columns::

        _, user, posture, block, trial, _, "key", xkeyboard, ykeyboard, systime

    The posture code doubles as the task type and selects the inputting
    finger.  Every row is a tap-down event.  A blank line ends the data.
    """

    data_format = DataFormat.B

    def parse_header(self, lines: NumberedLines) -> None:
        next(lines, None)

    def ends_stream(self, line: str) -> bool:
        return not line

    def parse_line(self, line: str) -> Optional[EventRecord]:
        tokens = [t.strip() for t in line.strip().split(",")]
        if len(tokens) < 10:
            logger.debug("Too few fields in line: %r", line)
            return None

        try:
            posture = int(tokens[2])
            record = EventRecord(
                inputting_finger=None,
                user_id=int(tokens[1]),
                task_type=posture,
                block_index=int(tokens[3]),
                trial_index=int(tokens[4]),
                key=self._unquote(tokens[6]).lower() or None,
                xkeyboard=float(tokens[7]),
                ykeyboard=float(tokens[8]),
                systime=int(tokens[9]),
            )
        except ValueError:
            logger.debug("Non-numeric field in line: %r", line)
            return None

        record.inputting_finger = self.config.finger_codes.get(posture)
        if record.inputting_finger is None:
            logger.debug("Unknown posture code %d", posture)
        return record

    @staticmethod
    def _unquote(token: str) -> str:
        if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
            return token[1:-1]
        return token


PARSERS = {
    DataFormat.A: FormatAParser,
    DataFormat.B: FormatBParser,
}


def get_parser(data_format: DataFormat, config: Optional[Config] = None) -> LineParser:
    """Instantiate the parser for ``data_format``."""
    return PARSERS[DataFormat(data_format)](config)
