"""Text normalization and brace scanning helpers shared by the extractors.

Messages are pasted from chat clients, so they arrive with typographic
quotes, backticks, carriage returns and zero-width characters. The helpers
here reduce that noise before the regex rules run.
"""

from __future__ import annotations

import re
from typing import Final

from formable_wiki.parsers.types import UnbalancedBraceError

# Typographic quotes and backticks mapped onto the two straight forms
QUOTE_TRANSLATION: Final[dict[int, str]] = str.maketrans(
    {
        "“": '"',  # left double
        "”": '"',  # right double
        "„": '"',  # low double
        "‘": "'",  # left single
        "’": "'",  # right single
        "`": "'",
    }
)

# Zero-width and invisible whitespace injected by chat clients
INVISIBLE_CHARS: Final[str] = "\u200b\u200c\u200d\ufeff\u00a0\u2028\u2029"

# Every quote variant, straight and curly
ALL_QUOTES: Final[str] = "\"'“”‘’`"

STRIP_CHARS_PATTERN: Final[re.Pattern[str]] = re.compile(f"[{re.escape(ALL_QUOTES + INVISIBLE_CHARS)}]")


def normalize_quotes(text: str) -> str:
    """Fold smart quotes and backticks into straight quotes and drop ``\\r``.

    Examples:
        >>> normalize_quotes("Name = “Rus”\\r\\n")
        'Name = "Rus"\\n'
    """
    return text.translate(QUOTE_TRANSLATION).replace("\r", "")


def strip_quotes_and_invisibles(item: str) -> str:
    """Remove every quote variant and invisible character, then trim.

    Examples:
        >>> strip_quotes_and_invisibles(' “Ukraine”\\u200b ')
        'Ukraine'
    """
    return STRIP_CHARS_PATTERN.sub("", item).strip(" \t\n" + INVISIBLE_CHARS)


def strip_wrapping(value: str, chars: str = "\"'[]") -> str:
    """Strip wrapping quote/bracket characters and surrounding whitespace."""
    return value.strip().strip(chars).strip()


def find_block_end(text: str, open_index: int) -> int:
    """Return the index just past the brace that closes ``text[open_index]``.

    Counts ``{`` and ``}`` from ``open_index`` (which must hold ``{``) until the
    depth returns to zero, so nested inline tables are captured whole.

    Args:
        text: Text to scan.
        open_index: Index of the opening brace.

    Returns:
        Index one past the matching closing brace.

    Raises:
        UnbalancedBraceError: If the depth never returns to zero.

    Examples:
        >>> find_block_end("{a, {b}, c} tail", 0)
        11
    """
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    raise UnbalancedBraceError(open_index)


def block_interior(text: str, open_index: int) -> str:
    """Return the text between the brace at ``open_index`` and its match."""
    end = find_block_end(text, open_index)
    return text[open_index + 1 : end - 1]


def non_blank_lines(text: str) -> list[str]:
    """Split on newlines and keep lines with visible content."""
    return [line for line in re.split(r"\r?\n", text) if line.strip()]


def key_pattern(key: str) -> str:
    """Escape a field key for regex use; spaces match any whitespace run.

    Examples:
        >>> key_pattern("formable modifier")
        'formable\\\\s+modifier'
    """
    return r"\s+".join(re.escape(part) for part in key.split())
