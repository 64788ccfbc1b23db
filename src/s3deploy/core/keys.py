"""Remote key derivation for local build outputs."""

from __future__ import annotations

from pathlib import PurePath

from s3deploy.core.exceptions import KeyMappingError


def _join_key(prefix: str, rest: str) -> str:
    prefix = prefix.strip("/")
    rest = rest.lstrip("/")
    if prefix:
        return f"{prefix}/{rest}" if rest else prefix
    return rest


def map_key(root: str | PurePath, local_path: str | PurePath, prefix: str = "") -> str:
    """
    Derive the remote key of ``local_path``.

    The ``root`` prefix is stripped from ``local_path`` and the remainder is
    joined onto ``prefix`` with '/' separators.

    Example:
        map_key("/build/out", "/build/out/a/b.txt", "releases/v1")
        -> "releases/v1/a/b.txt"

    Raises:
        KeyMappingError: If ``local_path`` is not under ``root``,
            including lexically through a ".." segment.
    """
    root_path = PurePath(root)
    path = PurePath(local_path)
    try:
        relative = path.relative_to(root_path)
    except ValueError as exc:
        raise KeyMappingError(f"{path} is not under {root_path}") from exc

    if ".." in relative.parts:
        raise KeyMappingError(f"{path} escapes {root_path} through '..'")
    if not relative.parts:
        raise KeyMappingError(f"{path} is the mapping root itself, not a file")
    return _join_key(prefix, relative.as_posix())


def archive_key(resolved_key: str) -> str:
    """Single-archive mode: the resolved key template is the key as-is."""
    return resolved_key


__all__ = ["map_key", "archive_key"]
