"""Boot image sections and build steps for the example firmware images."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Tuple, Union

_OTFAD_LEN = 256
_KEYSTORE_LEN = 2048
_LUT_WORDS = 64
_LINKER_SCRIPT = "memory.x"
_RT685_BOOT_IMAGE_VERSION = 0x01000000


def _rt633_lookup_table() -> Tuple[Any, ...]:
    # Sequence 0: read data in single-lane SPI (command 0x03, 24-bit address).
    read_data = (("CMD_SDR", "Single", 0x03), ("RADDR_SDR", "Single", 0x18))
    # Sequence 1: read 128 data bytes and stop.
    read_bytes = (("READ_SDR", "Single", 0x80), ("STOP", "Single", 0x00))
    return (read_data, read_bytes) + (0,) * (_LUT_WORDS - 2)


@dataclass(frozen=True)
class ImageSections:
    """Contents of the fixed boot sections of a firmware image."""

    boot_image_version: int
    fcb: Mapping[str, Any] = field(default_factory=dict)
    otfad: bytes = bytes(_OTFAD_LEN)
    keystore: bytes = bytes(_KEYSTORE_LEN)


def parse_version(version: str) -> Tuple[int, int, int]:
    """Split a major.minor.patch version into three 8-bit numbers."""
    parts = version.split(".")
    if len(parts) != 3:
        raise ValueError(f"version must be major.minor.patch, not {version!r}")
    numbers = []
    for name, part in zip(("major", "minor", "patch"), parts):
        try:
            number = int(part)
        except ValueError:
            raise ValueError(f"should have {name} version") from None
        if not 0 <= number <= 0xFF:
            raise ValueError(f"{name} version {number} does not fit in 8 bits")
        numbers.append(number)
    return numbers[0], numbers[1], numbers[2]


def boot_image_version(major: int, minor: int, patch: int) -> int:
    """Pack a version as the boot image version word: major, minor, patch, zero."""
    for name, number in (("major", major), ("minor", minor), ("patch", patch)):
        if not 0 <= number <= 0xFF:
            raise ValueError(f"{name} version {number} does not fit in 8 bits")
    return int(f"{major:02x}{minor:02x}{patch:02x}00", 16)


def stage_linker_script(out_dir: Union[str, os.PathLike], script: Union[str, os.PathLike]) -> List[str]:
    """Copy the linker script into out_dir and return the build directives to emit."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    (out / _LINKER_SCRIPT).write_bytes(Path(script).read_bytes())
    return [
        f"cargo:rustc-link-search={out}",
        f"cargo:rerun-if-changed={_LINKER_SCRIPT}",
    ]


def rt633_sections(version: str = "0.1.0") -> ImageSections:
    """Boot sections of the RT633 image, versioned from the package version."""
    fcb = {
        "device_mode_cfg_enable": 0,
        "wait_time_cfg_commands": 0,
        "device_mode_arg": (0, 0, 0, 0),
        "config_mode_type": (0, 1, 2),
        "controller_misc_option": 0x10,
        "sflash_pad_type": "QuadPads",
        "serial_clk_freq": "SdrDdr50mhz",
        "sflash_a1_size": 0x0040_0000,
        "sflash_b1_size": 0,
        "lookup_table": _rt633_lookup_table(),
        "serial_nor_type": "StandardSpi",
        "flash_state_ctx": 0,
    }
    return ImageSections(boot_image_version(*parse_version(version)), fcb)


def rt685_sections() -> ImageSections:
    """Boot sections of the RT685 evaluation image, with a default FCB."""
    return ImageSections(_RT685_BOOT_IMAGE_VERSION)