"""Named sections of non-volatile 32-bit registers, guarded per section."""

from __future__ import annotations

import abc
import argparse
import asyncio
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence, Tuple

_U32_MAX = 0xFFFFFFFF


class NvramBackend(abc.ABC):
    """Storage of 32-bit words addressed by index."""

    @abc.abstractmethod
    def read(self, address: int) -> int:
        """Read the word at address."""

    @abc.abstractmethod
    def write(self, address: int, value: int) -> None:
        """Write value to the word at address."""

    @abc.abstractmethod
    def valid_range(self) -> range:
        """Addresses that may be used."""


class NullBackend(NvramBackend):
    """A backend with no usable storage: reads give 0, writes are dropped."""

    def read(self, address: int) -> int:
        return 0

    def write(self, address: int, value: int) -> None:
        return None

    def valid_range(self) -> range:
        return range(0, 0)


class MemoryBackend(NvramBackend):
    """In-memory general-purpose registers; the first three are reserved by default."""

    def __init__(self, valid_range: range = range(3, 8)) -> None:
        self._range = valid_range
        self._words: Dict[int, int] = {}

    def read(self, address: int) -> int:
        return self._words.get(address, 0)

    def write(self, address: int, value: int) -> None:
        self._words[address] = value

    def valid_range(self) -> range:
        return self._range


class InvalidOffsetError(ValueError):
    """A table offset lies outside what the backend can access."""

    def __init__(self, offset: int) -> None:
        super().__init__(f"invalid NVRAM offset {offset}")
        self.offset = offset


@dataclass
class _Info:
    offset: int
    guard: threading.Lock = field(default_factory=threading.Lock, compare=False, repr=False)


class Table:
    """Section descriptor table linking indices to offsets."""

    def __init__(self, valid_offsets: Iterable[int]) -> None:
        self.sections: Tuple[_Info, ...] = tuple(_Info(offset) for offset in valid_offsets)

    def __len__(self) -> int:
        return len(self.sections)

    def get_index(self, offset: int) -> Optional[int]:
        """Index of the section at offset, or None."""
        return next((index for index, info in enumerate(self.sections) if info.offset == offset), None)


class ManagedSection:
    """Guarded handle to one section."""

    def __init__(self, info: _Info, backend: NvramBackend) -> None:
        self._info = info
        self._backend = backend

    @property
    def offset(self) -> int:
        return self._info.offset

    def read(self) -> int:
        with self._info.guard:
            return self._backend.read(self._info.offset)

    def write(self, value: int) -> None:
        if not 0 <= value <= _U32_MAX:
            raise ValueError(f"value {value} does not fit in 32 bits")
        with self._info.guard:
            self._backend.write(self._info.offset, value)


class Nvram:
    """The NVRAM service: initialized once with a table, then looked up by index."""

    def __init__(self, backend: Optional[NvramBackend] = None) -> None:
        self.backend = backend if backend is not None else NullBackend()
        self._layout: Optional[Tuple[_Info, ...]] = None
        self._ready = asyncio.Event()

    async def init(self, table: Table) -> None:
        """Install the table; raises InvalidOffsetError; only the first table is kept."""
        valid = self.backend.valid_range()
        for entry in table.sections:
            if entry.offset not in valid:
                raise InvalidOffsetError(entry.offset)
        if self._layout is None:
            self._layout = table.sections
        self._ready.set()

    async def lookup_section(self, index: int) -> Optional[ManagedSection]:
        """Wait until initialized, then return the section at index or None."""
        await self._ready.wait()
        layout = self._layout
        if not 0 <= index < len(layout):
            return None
        return ManagedSection(layout[index], self.backend)


async def _demo(backend: NvramBackend) -> None:
    general, special = 3, 4
    table = Table([general, special])
    nvram = Nvram(backend)
    await nvram.init(table)

    general_section = await nvram.lookup_section(table.get_index(general))
    general_section.write(0)
    general_section.write(1)
    print(f"general_section = {general_section.read()}")

    special_section = await nvram.lookup_section(table.get_index(special))
    print(f"special = {special_section.read()}")

    untouchable = await nvram.lookup_section(10)
    print(f"Attempted invalid section is_none = {untouchable is None}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Exercise a two-section table on the chosen backend."""
    parser = argparse.ArgumentParser(description="Exercise NVRAM sections.")
    parser.add_argument("--backend", choices=["memory", "null"], default="memory")
    args = parser.parse_args(argv)
    backend: NvramBackend = MemoryBackend() if args.backend == "memory" else NullBackend()
    try:
        asyncio.run(_demo(backend))
    except InvalidOffsetError as exc:
        print(f"error: {exc}")
        return 1
    return 0