"""Split a finished bundle into marker-delimited segments."""

from __future__ import annotations

from collections.abc import Sequence

from bundle_obfuscator.bundle.models import BundleSegment, SegmentMismatchError, SplitBundle
from bundle_obfuscator.markers import BEGIN_MARKER, END_MARKER, parse_file_label
from bundle_obfuscator.tagging.selection import ModuleRecord


def _segment_from_chunk(index: int, chunk: str) -> BundleSegment:
    label, body = parse_file_label(chunk)
    end_index = body.find(END_MARKER)
    if end_index == -1:
        return BundleSegment(index=index, label=label, tagged_code=body, suffix="")
    return BundleSegment(
        index=index,
        label=label,
        tagged_code=body[:end_index],
        suffix=body[end_index:],
    )


def split_bundle(bundle_text: str) -> SplitBundle:
    """Split bundle text on every BEGIN marker.

    The first chunk is the bootstrap head and is passed through unmodified.
    """
    head, *chunks = bundle_text.split(BEGIN_MARKER)
    segments = tuple(_segment_from_chunk(index, chunk) for index, chunk in enumerate(chunks))
    return SplitBundle(head=head, segments=segments)


def pair_segments(
    segments: Sequence[BundleSegment], selection: Sequence[ModuleRecord]
) -> list[tuple[BundleSegment, ModuleRecord]]:
    """Pair the Nth segment with the Nth selected module.

    Pairs stop at the shorter sequence. A labelled segment must name the
    module it is paired with.
    """
    pairs: list[tuple[BundleSegment, ModuleRecord]] = []
    for segment, record in zip(segments, selection):
        if segment.label is not None and segment.label != record.canonical_path:
            raise SegmentMismatchError(
                index=segment.index,
                expected=record.canonical_path,
                found=segment.label,
            )
        pairs.append((segment, record))
    return pairs


def selection_from_bundle(split: SplitBundle) -> tuple[ModuleRecord, ...]:
    """Rebuild the ordered selection from segment labels.

    Stops at the first unlabelled segment, since later positions can no
    longer be attributed.
    """
    records: list[ModuleRecord] = []
    for segment in split.segments:
        if segment.label is None:
            break
        records.append(ModuleRecord(canonical_path=segment.label, absolute_path=""))
    return tuple(records)
