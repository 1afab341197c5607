"""Source map composition."""

from .composer import SourceMapComposer, count_lines, from_base64, to_base64
from .vlq import decode_mappings, decode_values, encode_value, encode_values

__all__ = [
    "SourceMapComposer",
    "count_lines",
    "decode_mappings",
    "decode_values",
    "encode_value",
    "encode_values",
    "from_base64",
    "to_base64",
]
