"""Byte code definitions and classification for all 256 values.

Every byte the tokenizer sees is looked up here. The category says what the
byte is; the role says what it does to a word: letters build words, joiners
(hyphen and apostrophe) may sit inside a word between two letters, and
everything else breaks words.

Classification is ASCII only. Bytes with the high bit set are never letters.
"""

from dataclasses import dataclass
from enum import Enum


class ByteCategory(Enum):
    CONTROL = "control"
    WHITESPACE = "whitespace"
    LETTER_UPPER = "letter_upper"
    LETTER_LOWER = "letter_lower"
    DIGIT = "digit"
    PUNCTUATION = "punctuation"
    HIGH_BIT = "high_bit"


class WordRole(Enum):
    LETTER = "letter"
    JOINER = "joiner"
    BREAK = "break"


@dataclass(frozen=True)
class ByteCode:
    value: int
    hex: str
    category: ByteCategory
    role: WordRole
    ascii_char: str | None


HYPHEN = 0x2D
APOSTROPHE = 0x27

JOINER_BYTES = frozenset((HYPHEN, APOSTROPHE))


def classify_byte(value: int) -> ByteCode:
    """Classify a single byte value."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"byte value out of range: {value}")

    h = f"0x{value:02X}"

    if value in (0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x20):
        return ByteCode(value, h, ByteCategory.WHITESPACE, WordRole.BREAK,
                        chr(value) if value == 0x20 else None)

    if value < 0x20 or value == 0x7F:
        return ByteCode(value, h, ByteCategory.CONTROL, WordRole.BREAK, None)

    if value >= 0x80:
        return ByteCode(value, h, ByteCategory.HIGH_BIT, WordRole.BREAK, None)

    char = chr(value)
    if 0x41 <= value <= 0x5A:
        return ByteCode(value, h, ByteCategory.LETTER_UPPER, WordRole.LETTER, char)
    if 0x61 <= value <= 0x7A:
        return ByteCode(value, h, ByteCategory.LETTER_LOWER, WordRole.LETTER, char)
    if 0x30 <= value <= 0x39:
        return ByteCode(value, h, ByteCategory.DIGIT, WordRole.BREAK, char)

    role = WordRole.JOINER if value in JOINER_BYTES else WordRole.BREAK
    return ByteCode(value, h, ByteCategory.PUNCTUATION, role, char)


# Build the complete table
BYTE_TABLE = [classify_byte(v) for v in range(256)]

# Flat role lookup indexed by byte value, used on the tokenizer's hot path
ROLE_TABLE = tuple(bc.role for bc in BYTE_TABLE)


def is_letter(value: int) -> bool:
    return ROLE_TABLE[value] is WordRole.LETTER
