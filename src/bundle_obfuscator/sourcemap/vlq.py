"""Base64 VLQ codec for source map mappings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Final

BASE64_ALPHABET: Final[str] = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)
_DECODE_TABLE: Final[dict[str, int]] = {char: index for index, char in enumerate(BASE64_ALPHABET)}
_SHIFT = 5
_CONTINUATION_BIT = 1 << _SHIFT
_DIGIT_MASK = _CONTINUATION_BIT - 1


def encode_value(value: int) -> str:
    """Encode one signed integer."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    chars: list[str] = []
    while True:
        digit = vlq & _DIGIT_MASK
        vlq >>= _SHIFT
        if vlq:
            digit |= _CONTINUATION_BIT
        chars.append(BASE64_ALPHABET[digit])
        if not vlq:
            return "".join(chars)


def encode_values(values: Iterable[int]) -> str:
    """Encode a sequence of signed integers as one segment."""
    return "".join(encode_value(value) for value in values)


def decode_values(segment: str) -> list[int]:
    """Decode one segment into signed integers."""
    values: list[int] = []
    shift = 0
    accumulator = 0
    for char in segment:
        digit = _DECODE_TABLE.get(char)
        if digit is None:
            raise ValueError(f"Invalid base64 VLQ character: {char!r}")
        accumulator += (digit & _DIGIT_MASK) << shift
        if digit & _CONTINUATION_BIT:
            shift += _SHIFT
            continue
        negative = accumulator & 1
        magnitude = accumulator >> 1
        values.append(-magnitude if negative else magnitude)
        shift = 0
        accumulator = 0
    if shift:
        raise ValueError("Truncated base64 VLQ segment.")
    return values


def decode_mappings(mappings: str) -> list[list[tuple[int, ...]]]:
    """Decode a mappings string into absolute segments per generated line.

    Each segment is (generated_column, source_index, original_line,
    original_column[, name_index]).
    """
    lines: list[list[tuple[int, ...]]] = []
    state = [0, 0, 0, 0, 0]
    for raw_line in mappings.split(";"):
        state[0] = 0
        segments: list[tuple[int, ...]] = []
        for raw_segment in raw_line.split(","):
            if not raw_segment:
                continue
            deltas = decode_values(raw_segment)
            for position, delta in enumerate(deltas):
                state[position] += delta
            segments.append(tuple(state[: len(deltas)]))
        lines.append(segments)
    return lines


def encode_line_mappings(lines: Sequence[Sequence[tuple[int, int, int, int]]]) -> str:
    """Encode absolute (gen_col, source, orig_line, orig_col) segments per line."""
    previous_source = 0
    previous_line = 0
    previous_column = 0
    encoded_lines: list[str] = []
    for segments in lines:
        previous_generated_column = 0
        encoded_segments: list[str] = []
        for generated_column, source, original_line, original_column in segments:
            encoded_segments.append(
                encode_values(
                    (
                        generated_column - previous_generated_column,
                        source - previous_source,
                        original_line - previous_line,
                        original_column - previous_column,
                    )
                )
            )
            previous_generated_column = generated_column
            previous_source = source
            previous_line = original_line
            previous_column = original_column
        encoded_lines.append(",".join(encoded_segments))
    return ";".join(encoded_lines)
