from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

import blake3

from addondebug.infra.logging_utils import LOGGER

DLL_SUFFIX = ".dll"


class GameDirError(Exception):
    pass


@dataclass
class FileHashResult:
    sha256: str
    blake3: str


def compute_sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def compute_blake3_hash(data: bytes) -> str:
    return blake3.blake3(data).hexdigest()


def hash_bytes(data: bytes) -> FileHashResult:
    return FileHashResult(sha256=compute_sha256(data), blake3=compute_blake3_hash(data))


def relative_name(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _raise_walk_error(exc: OSError) -> None:
    raise exc


def iter_files(root: Path) -> Iterator[Tuple[Path, int]]:
    """Yield (path, size) for every file under root, in sorted order.

    Entries are stat'ed without following symlinks, so a dangling link is
    still yielded and fails later on its own.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            try:
                size = path.lstat().st_size
            except OSError as exc:
                LOGGER.warning("Unable to stat file", extra={"extra_data": {"path": str(path), "error": str(exc)}})
                size = 0
            yield path, size


def is_dll(path: Path) -> bool:
    return path.suffix.lower() == DLL_SUFFIX


def find_dlls(root: Path) -> List[Path]:
    return [path for path, _ in iter_files(root) if is_dll(path)]


def check_game_dir(path: Path, markers: Sequence[str]) -> None:
    if not path.is_dir():
        raise GameDirError(f"{path} is not a directory")
    for marker in markers:
        if not (path / marker).exists():
            raise GameDirError(f"{marker} not found")
