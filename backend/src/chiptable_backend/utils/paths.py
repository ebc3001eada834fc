"""Multi-path update helpers for table documents.

Paths are ``/``-separated and relative to one table document, e.g.
``players/2/chips``. Writing ``None`` to a mapping key removes the key.
"""

from __future__ import annotations

from typing import Any


def split_path(path: str) -> list[str | int]:
    parts: list[str | int] = []
    for part in path.strip("/").split("/"):
        if not part:
            raise ValueError(f"empty segment in path {path!r}")
        parts.append(int(part) if part.isdigit() else part)
    return parts


def diff_documents(before: Any, after: Any, prefix: str = "") -> dict[str, Any]:
    """Return the smallest ``{path: value}`` set turning ``before`` into ``after``.

    Lists are diffed element-wise only when their lengths match; otherwise the
    whole list is written under its own path.
    """
    if isinstance(before, dict) and isinstance(after, dict):
        updates: dict[str, Any] = {}
        for key in after:
            child = f"{prefix}/{key}" if prefix else str(key)
            if key not in before:
                updates[child] = after[key]
            else:
                updates.update(diff_documents(before[key], after[key], child))
        for key in before:
            if key not in after:
                updates[f"{prefix}/{key}" if prefix else str(key)] = None
        return updates

    if isinstance(before, list) and isinstance(after, list) and len(before) == len(after) and prefix:
        updates = {}
        for index, (old, new) in enumerate(zip(before, after)):
            updates.update(diff_documents(old, new, f"{prefix}/{index}"))
        return updates

    if before == after:
        return {}
    if not prefix:
        raise ValueError("cannot replace the document root with a path update")
    return {prefix: after}


def apply_updates(document: dict[str, Any], updates: dict[str, Any]) -> None:
    """Apply ``updates`` to ``document`` in place.

    Raises ``KeyError``/``IndexError`` for a path whose parent does not exist;
    callers apply to a copy to keep the write all-or-nothing.
    """
    for path, value in updates.items():
        parts = split_path(path)
        parent: Any = document
        for part in parts[:-1]:
            parent = parent[part] if isinstance(parent, list) else parent[str(part)]
        leaf = parts[-1]

        if isinstance(parent, list):
            if not isinstance(leaf, int):
                raise KeyError(f"list segment {leaf!r} in path {path!r} is not an index")
            if leaf == len(parent):
                parent.append(value)
            else:
                parent[leaf] = value
        elif value is None:
            parent.pop(leaf, None)
        else:
            parent[str(leaf)] = value
