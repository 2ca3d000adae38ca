from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

LABELS: Tuple[str, ...] = (
    "is_stats_module",
    "is_stats_addon",
    "is_generic_loader_shim",
    "is_generic_loader_core",
    "is_generic_loader_addon",
    "is_framework_core",
    "is_framework_addon",
    "is_graphics_shim_primary",
    "is_graphics_shim_secondary",
)

_U16_MAX = 0xFFFF


@dataclass(frozen=True)
class FileVersion:
    major: int
    minor: int
    build: int
    revision: int

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not 0 <= value <= _U16_MAX:
                raise ValueError(f"{f.name} out of range for a 16-bit version component: {value}")

    @classmethod
    def from_ms_ls(cls, ms: int, ls: int) -> "FileVersion":
        """Build from the FileVersionMS/FileVersionLS words of VS_FIXEDFILEINFO."""
        return cls(ms >> 16, ms & _U16_MAX, ls >> 16, ls & _U16_MAX)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}.{self.revision}"


@dataclass(frozen=True)
class ModuleFacts:
    exported_names: Tuple[str, ...] = ()
    raw_bytes: bytes = b""
    file_version: Optional[FileVersion] = None

    def __post_init__(self) -> None:
        # accept lists from callers, store a hashable tuple
        object.__setattr__(self, "exported_names", tuple(self.exported_names))


@dataclass(frozen=True)
class ClassificationRecord:
    is_stats_module: bool = False
    is_stats_addon: bool = False
    is_generic_loader_shim: bool = False
    is_generic_loader_core: bool = False
    is_generic_loader_addon: bool = False
    is_framework_core: bool = False
    is_framework_addon: bool = False
    is_graphics_shim_primary: bool = False
    is_graphics_shim_secondary: bool = False
    file_version: Optional[FileVersion] = None

    def true_labels(self) -> List[str]:
        return [label for label in LABELS if getattr(self, label)]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {label: getattr(self, label) for label in LABELS}
        payload["file_version"] = str(self.file_version) if self.file_version else None
        return payload

    def __str__(self) -> str:
        parts = [f"{label}: {getattr(self, label)}" for label in LABELS]
        parts.append(f"file_version: {self.file_version or 'unknown'}")
        return ", ".join(parts)


@dataclass
class ModuleReport:
    path: str
    size: int
    sha256: str
    blake3: str
    record: ClassificationRecord
    markers: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        record = self.record.to_dict()
        return {
            "path": self.path,
            "size": self.size,
            "sha256": self.sha256,
            "blake3": self.blake3,
            "labels": [label for label in LABELS if record[label]],
            "markers": list(self.markers),
            "file_version": record["file_version"],
        }


@dataclass
class ScanFailure:
    path: str
    error: str


@dataclass
class ScanSummary:
    target: Path
    modules: List[ModuleReport] = field(default_factory=list)
    failures: List[ScanFailure] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "target": str(self.target),
            "modules": [m.to_dict() for m in self.modules],
            "failures": [asdict(f) for f in self.failures],
        }


class ExtractionError(Exception):
    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path
        self.message = message
