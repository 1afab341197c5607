"""Bundle splitting and reassembly."""

from .models import BundleSegment, FileRecord, SegmentMismatchError, SplitBundle
from .reassembler import reassemble, write_bundle
from .splitter import pair_segments, selection_from_bundle, split_bundle

__all__ = [
    "BundleSegment",
    "FileRecord",
    "SegmentMismatchError",
    "SplitBundle",
    "pair_segments",
    "reassemble",
    "selection_from_bundle",
    "split_bundle",
    "write_bundle",
]
