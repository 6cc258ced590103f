"""Path pattern matching.

Patterns are plain paths whose segments may be parameters, written with a
leading ``:`` (``/users/:id``). A pattern matches a path when both have the
same number of segments and every non-parameter segment is equal.
Parameter values are read back positionally.
"""

from __future__ import annotations

Params = dict[int, str]

PARAM_MARKER = ":"


def normalize_path(path: str) -> str:
    """Ensure a leading slash and strip a trailing one (except for ``/``)."""
    if not path.startswith("/"):
        path = "/" + path
    if path != "/" and path.endswith("/"):
        path = path[:-1]
    return path


def split_segments(path: str) -> list[str]:
    # "/a/b" -> ["a", "b"]; "/" -> [""]
    return path.split("/")[1:]


def param_positions(pattern: str) -> Params:
    """Map segment index -> parameter name for every ``:name`` segment."""
    return {
        i: segment[len(PARAM_MARKER):]
        for i, segment in enumerate(split_segments(pattern))
        if segment.startswith(PARAM_MARKER)
    }


def match_path(pattern: str, path: str) -> bool:
    if pattern == path:
        return True

    pattern_segments = split_segments(pattern)
    path_segments = split_segments(path)
    if len(pattern_segments) != len(path_segments):
        return False

    for expected, actual in zip(pattern_segments, path_segments):
        if expected.startswith(PARAM_MARKER):
            if not actual:
                return False
            continue
        if expected != actual:
            return False
    return True


def extract_params(path: str, positions: Params) -> dict[str, str]:
    """Read the parameter values of ``path`` at the recorded segment indices."""
    segments = split_segments(path)
    return {
        name: segments[index]
        for index, name in positions.items()
        if index < len(segments)
    }
