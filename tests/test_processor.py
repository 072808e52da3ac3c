"""Tests for the tap sequence processor."""

import pytest

from tap_features.config import Config, DataFormat
from tap_features.data.ngrams import NgramDictionary
from tap_features.data.parsers import EventRecord
from tap_features.errors import FormatError
from tap_features.models.keyboard import KeyboardLayout
from tap_features.processing.processor import (
    BASE_COLUMNS,
    DELTA_COLUMNS,
    TapSequenceProcessor,
    TrialContext,
    advance,
)

NUM_BASE = len(BASE_COLUMNS)
NUM_DELTA = len(DELTA_COLUMNS)


def _make_keyboard() -> KeyboardLayout:
    lines = ["width=300, xoffset=0, yoffset=100, hmargin=4, vmargin=6, keyheight=40"]
    for i, letter in enumerate("abcdefghijklmnopqrstuvwxyz"):
        x = (i % 10) * 30
        top = 100 + (i // 10) * 40
        lines.append(f"{letter}, left={x}, right={x + 30}, top={top}, bottom={top + 40}")
    lines.append(", left=90, right=210, top=220, bottom=260")
    return KeyboardLayout(lines)


def _make_processor(data_format: DataFormat = DataFormat.B) -> TapSequenceProcessor:
    config = Config()
    config.data_format = data_format
    bigrams = NgramDictionary(["#a", "ab", "bc"])
    trigrams = NgramDictionary(["#ab", "abc"])
    return TapSequenceProcessor(_make_keyboard(), bigrams, trigrams, config)


def _record(key, x, y, t, pos=-1, user=1, task=1, trial=0, action="DOWN", finger="I"):
    return EventRecord(
        inputting_finger=finger,
        user_id=user,
        task_type=task,
        block_index=0,
        trial_index=trial,
        key=key,
        xkeyboard=float(x),
        ykeyboard=float(y),
        systime=t,
        action_type=action,
        pos_char_onphrase=pos,
    )


class TestHeader:
    def test_header_columns(self):
        processor = _make_processor()
        header = processor.header()
        assert header[:NUM_BASE] == [
            "line_num", "inputing_finger", "user_id", "trial_index", "key",
            "xkeyboard", "ykeyboard", "systime",
        ]
        assert header[NUM_BASE:NUM_BASE + NUM_DELTA] == [
            "xtravel", "ytravel", "down_time_elapse", "lr",
        ]
        assert header[NUM_BASE + NUM_DELTA:] == ["#a", "ab", "bc", "#ab", "abc"]
        assert len(header) == processor.num_columns


class TestFormatBSequence:
    def test_two_taps_in_one_trial(self):
        processor = _make_processor(DataFormat.B)

        first = processor.process(_record("a", 10, 20, 100), 2)
        assert first == [2, "I", 1, 0, "a", 10.0, 20.0, 100]

        second = processor.process(_record("b", 15, 25, 150), 3)
        assert len(second) == processor.num_columns
        assert second[:NUM_BASE] == [3, "I", 1, 0, "b", 15.0, 25.0, 150]
        assert second[NUM_BASE:NUM_BASE + NUM_DELTA] == [5.0, 5.0, 50, 0]
        # history "#ab": bigram "ab", trigram "#ab"
        assert second[NUM_BASE + NUM_DELTA:] == [0, 1, 0, 1, 0]

    def test_third_tap_shifts_history(self):
        processor = _make_processor(DataFormat.B)
        processor.process(_record("a", 10, 20, 100), 1)
        processor.process(_record("b", 15, 25, 150), 2)
        row = processor.process(_record("c", 200, 25, 230), 3)
        assert processor.context.letter_history == "abc"
        assert row[NUM_BASE:NUM_BASE + NUM_DELTA] == [185.0, 0.0, 80, 1]
        assert row[NUM_BASE + NUM_DELTA:] == [0, 0, 1, 0, 1]

    def test_new_trial_has_no_delta_block(self):
        processor = _make_processor(DataFormat.B)
        processor.process(_record("a", 10, 20, 100), 1)
        row = processor.process(_record("b", 15, 25, 150, trial=1), 2)
        assert len(row) == NUM_BASE
        assert processor.context.letter_history == "##b"

    @pytest.mark.parametrize("change", [{"user": 2}, {"task": 2}, {"trial": 3}])
    def test_any_change_of_trial_key_starts_new_trial(self, change):
        processor = _make_processor(DataFormat.B)
        processor.process(_record("a", 10, 20, 100), 1)
        row = processor.process(_record("b", 15, 25, 150, **change), 2)
        assert len(row) == NUM_BASE

    def test_unknown_finger_is_processed(self):
        processor = _make_processor(DataFormat.B)
        processor.process(_record("a", 10, 20, 100, finger=None), 1)
        row = processor.process(_record("b", 15, 25, 150, finger=None), 2)
        assert row[1] is None
        assert len(row) == processor.num_columns


class TestFormatASequence:
    def test_contiguous_positions_are_next_keys(self):
        processor = _make_processor(DataFormat.A)
        processor.process(_record("a", 10, 20, 100, pos=0), 1)
        row = processor.process(_record("b", 40, 20, 180, pos=1), 2)
        assert len(row) == processor.num_columns
        assert row[NUM_BASE:NUM_BASE + NUM_DELTA] == [30.0, 0.0, 80, 0]

    def test_gap_in_positions_has_no_delta_block(self):
        processor = _make_processor(DataFormat.A)
        processor.process(_record("a", 10, 20, 100, pos=0), 1)
        row = processor.process(_record("c", 70, 20, 180, pos=2), 2)
        assert len(row) == NUM_BASE
        # Same trial, so the history is neither shifted nor reset
        assert processor.context.letter_history == "##a"

    def test_gap_then_contiguous(self):
        processor = _make_processor(DataFormat.A)
        processor.process(_record("a", 10, 20, 100, pos=0), 1)
        processor.process(_record("c", 70, 20, 180, pos=2), 2)
        row = processor.process(_record("d", 100, 20, 260, pos=3), 3)
        assert len(row) == processor.num_columns
        assert processor.context.letter_history == "#ad"
        assert row[NUM_BASE:NUM_BASE + NUM_DELTA] == [30.0, 0.0, 80, 0]

    def test_word_completion_record_is_fatal(self):
        processor = _make_processor(DataFormat.A)
        record = _record("a", 10, 20, 100, pos=0)
        record.is_tap_format = False
        with pytest.raises(FormatError, match="Line 7"):
            processor.process(record, 7)


class TestSkippedEvents:
    def test_up_event_is_ignored(self):
        processor = _make_processor(DataFormat.B)
        processor.process(_record("a", 10, 20, 100), 1)
        before = processor.context
        assert processor.process(_record("b", 15, 25, 150, action="UP"), 2) is None
        assert processor.context == before

    def test_missing_key_is_ignored(self):
        processor = _make_processor(DataFormat.B)
        processor.process(_record("a", 10, 20, 100), 1)
        before = processor.context
        assert processor.process(_record(None, 15, 25, 150), 2) is None
        assert processor.context == before

    def test_end_of_data_resets(self):
        processor = _make_processor(DataFormat.B)
        processor.process(_record("a", 10, 20, 100), 1)
        assert processor.process(None, 0) is None
        assert processor.context == TrialContext.initial()
        row = processor.process(_record("b", 15, 25, 150), 3)
        assert len(row) == NUM_BASE


class TestIdempotence:
    def _trial(self):
        return [
            _record("a", 10, 20, 100),
            _record("b", 15, 25, 150),
            _record("c", 200, 25, 230),
        ]

    def test_fresh_processors_match(self):
        a, b = _make_processor(), _make_processor()
        rows_a = [a.process(r, i) for i, r in enumerate(self._trial())]
        rows_b = [b.process(r, i) for i, r in enumerate(self._trial())]
        assert rows_a == rows_b

    def test_reprocessing_after_reset_matches(self):
        processor = _make_processor()
        rows_a = [processor.process(r, i) for i, r in enumerate(self._trial())]
        processor.process(None, 0)
        rows_b = [processor.process(r, i) for i, r in enumerate(self._trial())]
        assert rows_a == rows_b

    def test_dictionaries_are_not_mutated(self):
        processor = _make_processor()
        for i, r in enumerate(self._trial()):
            processor.process(r, i)
        assert processor.bigrams.keys == ("#a", "ab", "bc")
        assert processor.trigrams.indicators("zzz").sum() == 0


def test_advance_is_pure():
    keyboard = _make_keyboard()
    bigrams = NgramDictionary(["ab"])
    trigrams = NgramDictionary(["#ab"])
    start = TrialContext.initial()

    context, row = advance(start, _record("a", 10, 20, 100), 1, keyboard,
                           bigrams, trigrams, DataFormat.B)
    assert start == TrialContext.initial()
    assert context.letter_history == "##a"
    assert context.systime == 100
    assert len(row) == NUM_BASE

    context, row = advance(context, _record("b", 15, 25, 150), 2, keyboard,
                           bigrams, trigrams, DataFormat.B)
    assert row[NUM_BASE + NUM_DELTA:] == [1, 1]
