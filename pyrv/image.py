"""Program image parsing.

A program image is text with one instruction word per line, written as
exactly 8 hexadecimal digits (no `0x` prefix, most-significant nibble
first). Line N (counted from 0) holds the word at byte address 4*N, so
blank lines are only allowed at the end of the image.
"""

import re
from typing import Iterable, Union

_WORD_RE = re.compile(r'^[0-9a-fA-F]{8}$')


class ImageFormatError(ValueError):
    def __init__(self, lineno, line):
        msg = f"Invalid program image line {lineno}: '{line}' (expected 8 hex digits)"  # noqa: E501
        super().__init__(msg)
        self.lineno = lineno


def parse_hex_image(lines: Union[str, Iterable[str]]) -> list[int]:
    """Converts a hex program image into a list of instruction words.

    Args:
        lines: The image text, or an iterable of its lines (for example an
            open file).

    Returns:
        List of words, word 0 first.

    Raises:
        ImageFormatError: A non-blank line is not exactly 8 hex digits, or
            a blank line is followed by another word.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    words = []
    first_blank = None
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            if first_blank is None:
                first_blank = lineno
            continue
        if first_blank is not None:
            # Skipping the blank line would shift every following word
            raise ImageFormatError(first_blank, '')
        if not _WORD_RE.match(line):
            raise ImageFormatError(lineno, line)
        words.append(int(line, 16))

    return words
