from __future__ import annotations

import json
from pathlib import Path

import pytest

from bundle_obfuscator.sourcemap import (
    SourceMapComposer,
    count_lines,
    decode_mappings,
    from_base64,
    to_base64,
)


def test_files_map_onto_consecutive_lines_after_header() -> None:
    composer = SourceMapComposer(header_lines=2)
    composer.add_file("App/a.js", "one\ntwo")
    composer.add_file("App/b.js", "three")

    document = composer.finalize()

    assert document["sources"] == ["App/a.js", "App/b.js"]
    assert document["sourcesContent"] == ["one\ntwo", "three"]
    assert document["version"] == 3
    assert decode_mappings(str(document["mappings"])) == [
        [],
        [],
        [(0, 0, 0, 0)],
        [(0, 0, 1, 0)],
        [(0, 1, 0, 0)],
    ]
    assert composer.line_offset == 3


def test_header_lines_shift_every_file() -> None:
    composer = SourceMapComposer(header_lines=0)
    composer.add_file("App/a.js", "x\n")

    lines = decode_mappings(str(composer.finalize()["mappings"]))

    assert lines == [[(0, 0, 0, 0)], [(0, 0, 1, 0)]]


def test_empty_composer_has_no_mappings() -> None:
    document = SourceMapComposer().finalize()

    assert document["mappings"] == ""
    assert document["sources"] == []
    assert document["file"] == "index.android.bundle.map"


def test_negative_header_is_rejected() -> None:
    with pytest.raises(ValueError, match="header_lines"):
        SourceMapComposer(header_lines=-1)


def test_count_lines_counts_trailing_partial_line() -> None:
    assert count_lines("") == 1
    assert count_lines("a\nb") == 2
    assert count_lines("a\nb\n") == 3


def test_base64_payload_decodes_to_same_document() -> None:
    document: dict[str, object] = {"version": 3, "sources": ["App/ä.js"], "mappings": "AAAA"}

    assert from_base64(to_base64(document)) == document


def test_non_object_payload_is_rejected() -> None:
    with pytest.raises(ValueError, match="JSON object"):
        from_base64(to_base64([1, 2]))  # type: ignore[arg-type]


def test_write_emits_json_map(tmp_path: Path) -> None:
    composer = SourceMapComposer(file_name="out.map")
    composer.add_file("App/a.js", "a")
    target = tmp_path / "maps" / "out.map"

    composer.write(target)

    written = json.loads(target.read_text(encoding="utf-8"))
    assert written["file"] == "out.map"
    assert written["sources"] == ["App/a.js"]
