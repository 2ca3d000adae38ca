from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pefile

from addondebug.core.models import ExtractionError, FileVersion, ModuleFacts
from addondebug.infra.logging_utils import LOGGER


def read_bytes(path: Path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as exc:
        raise ExtractionError(str(path), f"failed to read file ({exc.strerror or exc})") from exc


def parse_pe(path: Path, data: bytes) -> pefile.PE:
    try:
        return pefile.PE(data=data)
    except pefile.PEFormatError as exc:
        raise ExtractionError(str(path), f"failed to parse PE file ({exc.value})") from exc


def export_names(pe: pefile.PE) -> List[str]:
    names: List[str] = []
    if hasattr(pe, "DIRECTORY_ENTRY_EXPORT"):
        for exp in pe.DIRECTORY_ENTRY_EXPORT.symbols:
            # ordinal-only exports carry no name
            if exp.name:
                names.append(exp.name.decode("utf-8", "replace"))
    return names


def version_from_pe(pe: pefile.PE) -> Optional[FileVersion]:
    fixed = getattr(pe, "VS_FIXEDFILEINFO", None)
    if not fixed:
        return None
    if isinstance(fixed, list):
        fixed = fixed[0]
    try:
        return FileVersion.from_ms_ls(fixed.FileVersionMS, fixed.FileVersionLS)
    except (AttributeError, ValueError):
        return None


def extract_version(path: Path) -> Optional[FileVersion]:
    try:
        pe = parse_pe(path, read_bytes(path))
    except ExtractionError as exc:
        LOGGER.debug("Version unavailable", extra={"extra_data": {"file": str(path), "error": str(exc)}})
        return None
    try:
        return version_from_pe(pe)
    finally:
        pe.close()


def extract_facts(path: Path) -> ModuleFacts:
    data = read_bytes(path)
    pe = parse_pe(path, data)
    try:
        return ModuleFacts(
            exported_names=tuple(export_names(pe)),
            raw_bytes=data,
            file_version=version_from_pe(pe),
        )
    finally:
        pe.close()
