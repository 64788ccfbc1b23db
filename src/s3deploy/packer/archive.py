"""Deterministic zip archive of declared sources and dependency outputs."""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional, Tuple

from s3deploy.core.exceptions import ArchiveError
from s3deploy.utils.logging import get_logger

logger = get_logger(__name__)

# Earliest timestamp representable in a zip entry; fixed so that identical
# inputs give identical archive bytes.
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
ENTRY_MODE = 0o644


def archive_entry_name(dep_path: str) -> str:
    """
    Archive entry for a dependency output.

    The leading segment (the producing target's name) is dropped when the
    path has more than one segment:

        "targetname/sub/file.txt" -> "sub/file.txt"
        "file.txt"                -> "file.txt"
    """
    parts = dep_path.split("/")
    if len(parts) > 1:
        return "/".join(parts[1:])
    return dep_path


class ArchivePackager:
    """
    Builds the single archive uploaded in archive mode.

    Relative source paths are resolved against ``root``; entry names are the
    paths as given (sources) or re-rooted (dependency outputs).
    """

    def __init__(self, root: str | Path, compression: int = zipfile.ZIP_DEFLATED):
        self.root = Path(root)
        self.compression = compression

    def plan(
        self, srcs: Iterable[str], dep_outs: Iterable[str]
    ) -> List[Tuple[Path, str]]:
        """Ordered (source file, entry name) pairs; caller order is kept."""
        entries: List[Tuple[Path, str]] = []
        for src in srcs:
            entries.append((self.root / src, PurePosixPath(src).as_posix()))
        for dep in dep_outs:
            entries.append((self.root / dep, archive_entry_name(dep)))
        return entries

    def build(
        self,
        srcs: Iterable[str],
        dep_outs: Iterable[str],
        dest: str | Path,
    ) -> Path:
        """
        Write the archive to ``dest``.

        The archive is assembled in a temporary file next to ``dest`` and moved
        into place once complete. On any error the temporary file and any
        earlier archive at ``dest`` are removed and ArchiveError is raised.
        """
        dest = self.root / dest
        entries = self.plan(srcs, dep_outs)

        tmp_path: Optional[str] = None
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent
            )
            with os.fdopen(fd, "wb") as raw, zipfile.ZipFile(
                raw, "w", compression=self.compression
            ) as archive:
                for source, name in entries:
                    self._add_entry(archive, source, name)
            os.replace(tmp_path, dest)
            tmp_path = None
        except OSError as exc:
            logger.error(
                "archive_build_failed",
                dest=str(dest),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            # A stale archive from an earlier build must not be deployed.
            with contextlib.suppress(OSError):
                dest.unlink()
            raise ArchiveError(f"building archive {dest}: {exc}") from exc
        finally:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)

        logger.info("archive_built", dest=str(dest), entries=len(entries))
        return dest

    def _add_entry(self, archive: zipfile.ZipFile, source: Path, name: str) -> None:
        info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
        info.compress_type = self.compression
        info.external_attr = (0o100000 | ENTRY_MODE) << 16
        with open(source, "rb") as src, archive.open(info, "w") as entry:
            shutil.copyfileobj(src, entry)
        logger.debug("archive_entry_added", source=str(source), entry=name)


__all__ = ["ArchivePackager", "archive_entry_name"]
