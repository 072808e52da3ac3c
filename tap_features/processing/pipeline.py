"""End-to-end pass from a raw tap log to a feature table."""

import logging
from typing import Iterable, Iterator, List, Optional, TextIO

from tap_features.config import Config, DataFormat
from tap_features.data.ngrams import NgramDictionary, load_ngram_dictionaries
from tap_features.data.parsers import get_parser
from tap_features.models.keyboard import KeyboardLayout
from tap_features.processing.processor import TapSequenceProcessor

logger = logging.getLogger(__name__)


def format_row(row: List, delimiter: str = ",") -> str:
    return delimiter.join("" if value is None else str(value) for value in row)


class DatasetPipeline:
    """
    Drives one raw log through its parser and the tap sequence processor.

    The parser is chosen once from ``config.data_format``.  Line numbers
    in the output refer to physical lines of the raw log, header lines
    included.
    """

    def __init__(
        self,
        config: Config,
        keyboard: KeyboardLayout,
        bigrams: NgramDictionary,
        trigrams: NgramDictionary,
    ):
        self.config = config
        self.parser = get_parser(DataFormat(config.data_format), config)
        self.processor = TapSequenceProcessor(keyboard, bigrams, trigrams, config)

        self.lines_read = 0
        self.lines_skipped = 0
        self.rows_emitted = 0

    @classmethod
    def from_files(
        cls, config: Config, layout_path: str, ngram_path: str
    ) -> "DatasetPipeline":
        """Load the layout and the n-gram dictionaries, then build a pipeline."""
        keyboard = KeyboardLayout.from_file(layout_path, config)
        bigrams, trigrams = load_ngram_dictionaries(ngram_path)
        return cls(config, keyboard, bigrams, trigrams)

    def header(self) -> List[str]:
        return self.processor.header()

    def rows(self, lines: Iterable[str]) -> Iterator[List]:
        """Yield one feature row per qualifying tap in ``lines``."""
        self.lines_read = self.lines_skipped = self.rows_emitted = 0
        self.processor.reset()
        numbered = enumerate(lines, start=1)
        self.parser.parse_header(numbered)

        try:
            for line_number, raw in numbered:
                self.lines_read += 1
                line = raw.strip()
                if self.parser.ends_stream(line):
                    logger.debug("End of data at line %d", line_number)
                    break
                if not line or line.startswith("#"):
                    self.lines_skipped += 1
                    continue

                record = self.parser.parse_line(line)
                if record is None:
                    self.lines_skipped += 1
                    logger.debug("Skipping incomplete line %d", line_number)
                    continue

                row = self.processor.process(record, line_number)
                if row is not None:
                    self.rows_emitted += 1
                    yield row
        finally:
            # Also runs when the pass aborts or the caller stops early.
            self.processor.process(None, 0)

        logger.info(
            "Read %d lines, skipped %d, emitted %d rows",
            self.lines_read,
            self.lines_skipped,
            self.rows_emitted,
        )

    def run(self, lines: Iterable[str], out: TextIO) -> int:
        """
        Write the header and every feature row to ``out``.

        Returns:
            Number of feature rows written.
        """
        delimiter = self.config.output_delimiter
        out.write(format_row(self.header(), delimiter) + "\n")
        count = 0
        for row in self.rows(lines):
            out.write(format_row(row, delimiter) + "\n")
            count += 1
        return count


def process_dataset(
    lines: Iterable[str],
    out: TextIO,
    layout_path: str,
    ngram_path: str,
    config: Optional[Config] = None,
) -> int:
    """Convenience wrapper: build a pipeline from files and run it."""
    pipeline = DatasetPipeline.from_files(config or Config(), layout_path, ngram_path)
    return pipeline.run(lines, out)
