# =============================================================================
# lib/tabular.py - CSV Reading
# =============================================================================
# Reads a CSV path or buffer into the (header, rows) shape the engine works
# on. Every cell is kept as the raw string from the file: no NA conversion,
# no dtype inference. Typing is the compiler's job, not the reader's.
#
# Encoding and delimiter are detected when not given.
# =============================================================================

import io
import logging
from pathlib import Path
from typing import BinaryIO, Union

import pandas as pd

from lib.utils import TableReadError

# Set up logging for this module
logger = logging.getLogger(__name__)

# Type alias for file inputs
FileInput = Union[str, Path, BinaryIO, io.BytesIO, io.StringIO]


# =============================================================================
# Constants
# =============================================================================

ENCODINGS_TO_TRY = ["utf-8", "utf-8-sig", "latin-1", "cp1252"]
DELIMITERS_TO_TRY = [",", ";", "\t", "|"]
BOM = "\ufeff"
SNIFF_LINES = 5


# =============================================================================
# Detection
# =============================================================================

def decode_bytes(data: bytes, encoding: str | None = None) -> tuple[str, str]:
    """
    Decode raw bytes, trying common encodings when none is given.

    Returns:
        Tuple of (text, encoding used)
    """
    candidates = [encoding] if encoding else ENCODINGS_TO_TRY
    for candidate in candidates:
        try:
            text = data.decode(candidate)
            logger.debug(f"Detected encoding: {candidate}")
            return text, candidate
        except (UnicodeDecodeError, LookupError):
            continue
    raise TableReadError(
        f"Could not decode input with any of {candidates}",
        details={"encodings": candidates},
    )


def detect_delimiter(text: str) -> str:
    """
    Guess the field delimiter from the first non-blank lines.

    A delimiter scores the extra columns it gives the header line, scaled by
    the share of sampled lines that split to the same width. The earlier
    entry of DELIMITERS_TO_TRY wins a tie, and text that no delimiter splits
    is read as comma-separated.
    """
    lines = [line for line in text.splitlines() if line.strip()][:SNIFF_LINES]
    if not lines:
        return ","

    def score(delimiter: str) -> float:
        widths = [line.count(delimiter) + 1 for line in lines]
        agreeing = sum(1 for width in widths if width == widths[0])
        return (widths[0] - 1) * agreeing / len(widths)

    best = max(DELIMITERS_TO_TRY, key=score)
    if score(best) == 0:
        best = ","

    logger.debug(f"Detected delimiter: {best!r}")
    return best


def _read_text(source: FileInput, encoding: str | None) -> str:
    """Load the whole source as text."""
    if hasattr(source, "read"):
        if hasattr(source, "seek"):
            source.seek(0)
        data = source.read()
        if isinstance(data, str):
            return data
        return decode_bytes(data, encoding)[0]

    file_path = Path(source)
    if not file_path.exists():
        raise TableReadError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise TableReadError(f"Not a file: {file_path}")

    return decode_bytes(file_path.read_bytes(), encoding)[0]


# =============================================================================
# Reading
# =============================================================================

def read_table(
    source: FileInput,
    encoding: str | None = None,
    delimiter: str | None = None,
) -> tuple[list[str], list[list[str]]]:
    """
    Read a CSV into a header row and body rows of raw string cells.

    Blank lines are skipped. Short rows are padded with empty cells.

    Args:
        source: Path, or a text/binary file-like object
        encoding: Force an encoding instead of detecting one
        delimiter: Force a delimiter instead of detecting one

    Returns:
        Tuple of (header, rows); ([], []) for an empty input

    Raises:
        TableReadError: If the input cannot be found, decoded or parsed
    """
    text = _read_text(source, encoding)
    if text.startswith(BOM):
        text = text[len(BOM):]

    if delimiter is None:
        delimiter = detect_delimiter(text)

    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="warn",
        )
    except pd.errors.EmptyDataError:
        return [], []
    except (pd.errors.ParserError, ValueError) as e:
        raise TableReadError(f"Failed to read CSV: {e}") from e

    df = df.fillna("")
    table = df.values.tolist()
    if not table:
        return [], []

    header = [str(cell) for cell in table[0]]
    rows = [[str(cell) for cell in row] for row in table[1:]]

    logger.info(f"Read CSV: {len(rows)} rows × {len(header)} columns")
    return header, rows
