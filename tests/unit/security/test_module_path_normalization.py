from __future__ import annotations

import pytest

from bundle_obfuscator.security import normalize_module_path


def test_project_file_normalizes_to_canonical_js_path() -> None:
    assert normalize_module_path("/proj/App/index.ts", "/proj") == "App/index.js"


def test_parent_directory_escape_is_rejected() -> None:
    assert normalize_module_path("/proj/../secret.js", "/proj") is None


def test_embedded_traversal_segment_is_rejected() -> None:
    assert normalize_module_path("/proj/App/../../etc/passwd.js", "/proj") is None


@pytest.mark.parametrize(
    ("absolute_path", "project_root"),
    [
        ("", "/proj"),
        ("   ", "/proj"),
        ("/proj/App/index.js", ""),
        (None, "/proj"),
        ("/proj/App/index.js", None),
        (42, "/proj"),
    ],
)
def test_blank_or_non_string_inputs_are_rejected(
    absolute_path: object, project_root: object
) -> None:
    assert normalize_module_path(absolute_path, project_root) is None


def test_project_root_itself_is_rejected() -> None:
    assert normalize_module_path("/proj/", "/proj") is None


def test_sibling_directory_with_shared_prefix_is_not_under_root() -> None:
    assert normalize_module_path("/projX/App/index.js", "/proj") is None


def test_src_marker_fallback_for_paths_outside_root() -> None:
    assert normalize_module_path("/elsewhere/pkg/src/screens/Home.tsx", "/proj") == (
        "src/screens/Home.js"
    )


def test_trailing_separator_on_root_is_accepted() -> None:
    assert normalize_module_path("/proj/App/view.jsx", "/proj/") == "App/view.js"


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("a.js", "a.js"),
        ("a.jsx", "a.js"),
        ("a.ts", "a.js"),
        ("a.tsx", "a.js"),
        ("a.mjs", "a.js"),
        ("a.cjs", "a.js"),
    ],
)
def test_source_extensions_rewrite_to_js(filename: str, expected: str) -> None:
    assert normalize_module_path(f"/proj/lib/{filename}", "/proj") == f"lib/{expected}"


def test_only_trailing_extension_is_rewritten() -> None:
    assert normalize_module_path("/proj/a.ts.d/b.ts", "/proj") == "a.ts.d/b.js"


def test_windows_style_root_is_stripped() -> None:
    assert normalize_module_path("C:\\proj\\App\\index.ts", "C:\\proj") == "App\\index.js"


def test_windows_style_traversal_is_rejected() -> None:
    assert normalize_module_path("C:\\proj\\App\\..\\..\\x.js", "C:\\proj") is None


@pytest.mark.parametrize(
    "absolute_path",
    ["/proj/App/..\\x.js", "/proj/App\\../x.js", "/proj/..\\x.js", "/proj/App/.."],
)
def test_mixed_separator_traversal_is_rejected(absolute_path: str) -> None:
    assert normalize_module_path(absolute_path, "/proj") is None


def test_dot_prefixed_file_name_is_not_traversal() -> None:
    assert normalize_module_path("/proj/App/..hidden.js", "/proj") == "App/..hidden.js"
