"""Insert boundary markers into one module's emitted code."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Final

from bundle_obfuscator.markers import BEGIN_MARKER, END_MARKER, file_label, has_markers

LINE_TERMINATORS: Final[tuple[str, ...]] = ("\r\n", "\n", "\r")


def _skip_line_terminator(code: str, position: int) -> int:
    """Advance position past one line terminator starting there, if any."""
    for terminator in LINE_TERMINATORS:
        if code.startswith(terminator, position):
            return position + len(terminator)
    return position


def tag_module_code(code: str, label: str | None = None) -> str:
    """Wrap the module body between its outer braces with boundary markers.

    The body starts after the first '{' and ends before the last '}'. A line
    terminator right after the opening brace stays outside the tagged region.
    Text without braces is wrapped whole.

    Example:
        __d(function(g,r,i,a,m,e,d){
          <BEGIN>user code...<END>},0,[],"App/index.js");
    """
    if has_markers(code):
        return code

    open_index = code.find("{")
    start = 0 if open_index == -1 else _skip_line_terminator(code, open_index + 1)
    close_index = code.rfind("}")
    end = len(code) if close_index == -1 else max(close_index, start)

    head = BEGIN_MARKER if label is None else BEGIN_MARKER + file_label(label)
    return code[:start] + head + code[start:end] + END_MARKER + code[end:]


def tag_output_unit(data: MutableMapping[str, object], label: str | None = None) -> None:
    """Tag the 'code' entry of one host output unit in place."""
    code = data.get("code")
    if not isinstance(code, str):
        return
    data["code"] = tag_module_code(code, label)
