"""Staging copies and deterministic tar artifacts.

The staging copy drops source permissions and timestamps (files become
0644, directories 0755), so what gets packed depends only on file names
and contents. The tar writer fixes ordering, mtimes and ownership for the
same reason: identical staging trees always yield identical artifact bytes.
"""

from __future__ import annotations

import io
import logging
import shutil
import tarfile
from pathlib import Path

from pagesmith.core.errors import PublishError
from pagesmith.core.hasher import iter_tree_files

logger = logging.getLogger(__name__)

FILE_MODE = 0o644
DIR_MODE = 0o755


class OutputMissingError(PublishError):
    """Raised when the directory to publish does not exist."""


class EmptyOutputError(PublishError):
    """Raised when the directory to publish contains no files."""


def _iter_tree_dirs(root: Path) -> list[Path]:
    """All directories under *root*, parents before children."""
    dirs = [p for p in root.rglob("*") if p.is_dir()]
    return sorted(dirs, key=lambda p: p.relative_to(root).as_posix())


def copy_tree_fresh(source: Path, target: Path, *, allow_empty: bool = False) -> int:
    """Replace *target* with a permission-normalised copy of *source*.

    Empty directories are copied too. Returns the number of files copied.
    """
    source = Path(source)
    target = Path(target)
    if not source.is_dir():
        raise OutputMissingError(f"Output directory does not exist: {source}")

    files = iter_tree_files(source)
    if not files and not allow_empty:
        raise EmptyOutputError(f"Output directory is empty: {source}")

    if target.exists():
        shutil.rmtree(target)
    target.mkdir(parents=True)
    target.chmod(DIR_MODE)

    try:
        for path in _iter_tree_dirs(source):
            d = target / path.relative_to(source)
            d.mkdir()
            d.chmod(DIR_MODE)
        for path in files:
            dest = target / path.relative_to(source)
            shutil.copyfile(path, dest)
            dest.chmod(FILE_MODE)
    except OSError as exc:
        raise PublishError(f"Copy from {source} to {target} failed: {exc}") from exc

    logger.info("Staged %d files from %s into %s", len(files), source, target)
    return len(files)


def pack_directory(root: Path) -> bytes:
    """Pack *root* into an uncompressed, byte-for-byte reproducible tar."""
    root = Path(root)
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=tarfile.PAX_FORMAT) as tar:
        for path in _iter_tree_dirs(root):
            name = path.relative_to(root).as_posix()
            tar.addfile(_tar_info(name, tarfile.DIRTYPE, DIR_MODE, 0))
        for path in iter_tree_files(root):
            rel = path.relative_to(root)
            data = path.read_bytes()
            info = _tar_info(rel.as_posix(), tarfile.REGTYPE, FILE_MODE, len(data))
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def _tar_info(name: str, kind: bytes, mode: int, size: int) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name)
    info.type = kind
    info.mode = mode
    info.size = size
    info.mtime = 0
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


def unpack_artifact(data: bytes, target: Path) -> None:
    """Extract an artifact produced by ``pack_directory`` into *target*."""
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as tar:
            tar.extractall(target, filter="data")
    except (tarfile.TarError, OSError) as exc:
        raise PublishError(f"Artifact could not be extracted into {target}: {exc}") from exc
