import struct
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

import pytest

FILE_ALIGNMENT = 0x200
SECTION_ALIGNMENT = 0x1000
SECTION_RVA = 0x1000
RT_VERSION = 16


def _align(value: int, alignment: int) -> int:
    return (value + alignment - 1) // alignment * alignment


def _export_block(names: Sequence[str], offset: int) -> bytes:
    count = len(names)
    functions_off = offset + 40
    names_off = functions_off + 4 * count
    ordinals_off = names_off + 4 * count
    strings_off = ordinals_off + 2 * count
    strings = b"fixture.dll\x00"
    name_rvas = []
    for name in names:
        name_rvas.append(SECTION_RVA + strings_off + len(strings))
        strings += name.encode("ascii") + b"\x00"
    directory = struct.pack(
        "<IIHHIIIIIII",
        0,
        0,
        0,
        0,
        SECTION_RVA + strings_off,
        1,
        count,
        count,
        SECTION_RVA + functions_off,
        SECTION_RVA + names_off,
        SECTION_RVA + ordinals_off,
    )
    # every export points at the ret stub at the start of the section
    functions = struct.pack(f"<{count}I", *([SECTION_RVA] * count))
    name_table = struct.pack(f"<{count}I", *name_rvas)
    ordinals = struct.pack(f"<{count}H", *range(count))
    return directory + functions + name_table + ordinals + strings


def _version_block(version: Tuple[int, int, int, int], offset: int) -> bytes:
    major, minor, build, revision = version
    ms = (major << 16) | minor
    ls = (build << 16) | revision
    key = "VS_VERSION_INFO\x00".encode("utf-16-le")
    header_len = 6 + len(key)
    padding = b"\x00" * (_align(header_len, 4) - header_len)
    fixed = struct.pack("<13I", 0xFEEF04BD, 0x10000, ms, ls, ms, ls, 0x3F, 0, 0x40004, 2, 0, 0, 0)
    info = struct.pack("<HHH", header_len + len(padding) + len(fixed), len(fixed), 0) + key + padding + fixed

    def directory(entry_id: int, target: int) -> bytes:
        return struct.pack("<IIHHHH", 0, 0, 0, 0, 0, 1) + struct.pack("<II", entry_id, target)

    tree = directory(RT_VERSION, 0x80000000 | 24)
    tree += directory(1, 0x80000000 | 48)
    tree += directory(0x409, 72)
    tree += struct.pack("<IIII", SECTION_RVA + offset + 88, len(info), 0, 0)
    return tree + info


def build_pe(
    exports: Sequence[str] = (),
    version: Optional[Tuple[int, int, int, int]] = None,
    extra: bytes = b"",
) -> bytes:
    """Assemble a minimal PE32 DLL with one section holding exports and a version resource."""
    section = bytearray(b"\xC3" * 16)
    data_dirs = [(0, 0)] * 16
    if exports:
        block = _export_block(exports, len(section))
        data_dirs[0] = (SECTION_RVA + len(section), len(block))
        section += block
    section += b"\x00" * (_align(len(section), 4) - len(section))
    if version:
        block = _version_block(version, len(section))
        data_dirs[2] = (SECTION_RVA + len(section), len(block))
        section += block
    section += extra
    raw_size = _align(len(section), FILE_ALIGNMENT)

    dos_header = b"MZ" + b"\x00" * 58 + struct.pack("<I", 0x40)
    file_header = struct.pack("<HHIIIHH", 0x14C, 1, 0, 0, 0, 0xE0, 0x2102)
    optional_header = struct.pack(
        "<HBB" + "I" * 9 + "H" * 6 + "I" * 4 + "HH" + "I" * 6,
        0x10B, 14, 0,
        0, raw_size, 0, 0, SECTION_RVA, SECTION_RVA, 0x10000000, SECTION_ALIGNMENT, FILE_ALIGNMENT,
        6, 0, 0, 0, 6, 0,
        0, SECTION_RVA + _align(len(section), SECTION_ALIGNMENT), FILE_ALIGNMENT, 0,
        2, 0,
        0x100000, 0x1000, 0x100000, 0x1000, 0, 16,
    )
    directories = b"".join(struct.pack("<II", rva, size) for rva, size in data_dirs)
    section_header = struct.pack(
        "<8sIIIIIIHHI", b".rdata", len(section), SECTION_RVA, raw_size, FILE_ALIGNMENT, 0, 0, 0, 0, 0x40000040
    )
    headers = dos_header + b"PE\x00\x00" + file_header + optional_header + directories + section_header
    headers += b"\x00" * (FILE_ALIGNMENT - len(headers))
    return headers + bytes(section) + b"\x00" * (raw_size - len(section))


@pytest.fixture
def build_dll(tmp_path: Path) -> Callable[..., Path]:
    def build(name: str, **kwargs) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_pe(**kwargs))
        return path

    return build
