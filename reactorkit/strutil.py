"""String splitting with the trimming rules used for configuration lines."""

from __future__ import annotations


def _trim_tab(text: str) -> str:
    """Cut from the first tab up to the last non-tab character."""
    pos = text.find("\t")
    if pos < 0:
        return text
    last = len(text.rstrip("\t")) - 1
    if last < pos:
        return text[:pos]
    return text[:pos] + text[last:]


def split_str(text: str, separator: str) -> list[str]:
    """Split ``text`` on ``separator``, trimming spaces and tabs from each piece."""
    if not separator:
        raise ValueError("separator must not be empty")
    return [_trim_tab(piece.strip(" ")) for piece in text.split(separator)]