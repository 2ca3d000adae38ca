from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class Encoding(Enum):
    ASCII = "ascii"
    UTF16LE = "utf-16-le"


def encode_pattern(needle: str, encoding: Encoding) -> bytes:
    """Encode an ASCII literal the way it is stored inside a compiled binary.

    UTF16LE expands every character to two bytes (code, 0x00) with no
    terminating null, which is how wide string literals appear in Windows
    modules.
    """
    if not needle.isascii():
        raise ValueError(f"Marker text must be ASCII: {needle!r}")
    return needle.encode(encoding.value)


def contains(haystack: bytes, needle: str, encoding: Encoding) -> bool:
    return encode_pattern(needle, encoding) in haystack


@dataclass(frozen=True)
class Marker:
    name: str
    text: str
    encoding: Encoding
    description: str
    pattern: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", encode_pattern(self.text, self.encoding))

    def found_in(self, data: bytes) -> bool:
        return self.pattern in data


ADDON_LOADER_DLL = Marker(
    name="addon_loader_dll",
    text="addonLoader.dll",
    encoding=Encoding.UTF16LE,
    description="Wide string naming the addon loader core library",
)
LOADER_CORE_DESCRIPTION = Marker(
    name="loader_core_description",
    text="core addon loading library",
    encoding=Encoding.UTF16LE,
    description="Version-resource description of the addon loader core",
)
FRAMEWORK_API_URL = Marker(
    name="framework_api_url",
    text="https://api.raidcore.gg",
    encoding=Encoding.ASCII,
    description="API endpoint embedded in the Nexus framework",
)

DEFAULT_MARKERS: List[Marker] = [ADDON_LOADER_DLL, LOADER_CORE_DESCRIPTION, FRAMEWORK_API_URL]


class MarkerEngine:
    def __init__(self, markers: List[Marker] | None = None) -> None:
        self.markers = markers if markers is not None else list(DEFAULT_MARKERS)

    def scan(self, data: bytes) -> List[Marker]:
        hits: List[Marker] = []
        for marker in self.markers:
            if marker.found_in(data):
                hits.append(marker)
        return hits
