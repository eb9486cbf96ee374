# isoebnf/scan/__init__.py
"""Byte scanner for ISO 14977 EBNF sources.

A `Scanner` is a mutable cursor over an immutable byte string. It keeps three
numbers: the absolute offset, the current line and the offset where that
line began. Columns are always derived (`offset - line start`), so a
`Position` snapshot taken with `position` and restored with `return_to` is
enough to undo any amount of scanning.

Line bookkeeping changes only through `add_line` (and `advance`, which calls
it for line terminators). Plain `step` never touches it.

API
---
- `Position(offset, line, character)`   — immutable snapshot, 0-based
- `ScanOptions(vertical_as_newline)`    — per-scanner settings
- `Scanner(data, options)`
    - `current` / `peek`                 — byte at cursor / cursor+1, or None
    - `step()` / `add_line()` / `advance()`
    - `complete()` / `offset` / `position` / `return_to(pos)`
    - `slice(start, stop)` / `startswith(symbol)` / `match(pattern)`
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

# line terminators
CR = 0x0D
LF = 0x0A
VT = 0x0B
FF = 0x0C

Source = Union[bytes, bytearray, memoryview, str]


@dataclass(frozen=True)
class Position:
    offset: int
    line: int       # 0-based
    character: int  # 0-based column

    def __str__(self) -> str:
        return f"{self.line}:{self.character}"


@dataclass(frozen=True)
class ScanOptions:
    """
    Scanner settings.
    - vertical_as_newline: count VT/FF as line boundaries (line/column only)
    """
    vertical_as_newline: bool = False


class Scanner:
    def __init__(self, data: Source, options: Optional[ScanOptions] = None):
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        elif not isinstance(data, bytes):
            raise TypeError("data must be bytes or str")
        self.data: bytes = data
        self.options = options or ScanOptions()
        self._offset = 0
        self._line = 0
        self._line_offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def current(self) -> Optional[int]:
        if self._offset >= len(self.data):
            return None
        return self.data[self._offset]

    @property
    def peek(self) -> Optional[int]:
        j = self._offset + 1
        if j >= len(self.data):
            return None
        return self.data[j]

    @property
    def position(self) -> Position:
        return Position(self._offset, self._line, self._offset - self._line_offset)

    def complete(self) -> bool:
        return self._offset >= len(self.data)

    def step(self) -> "Scanner":
        self._offset += 1
        return self

    def add_line(self) -> "Scanner":
        self._offset += 1
        self._line += 1
        self._line_offset = self._offset
        return self

    def advance(self) -> "Scanner":
        """Consume one logical character. CR LF counts as a single line boundary."""
        c = self.current
        if c == CR:
            if self.peek == LF:
                self.step()
            return self.add_line()
        if c == LF:
            return self.add_line()
        if self.options.vertical_as_newline and c in (VT, FF):
            return self.add_line()
        return self.step()

    def return_to(self, pos: Position) -> "Scanner":
        self._offset = pos.offset
        self._line = pos.line
        self._line_offset = pos.offset - pos.character
        return self

    def slice(self, start: int, stop: int) -> bytes:
        return self.data[start:stop]

    def startswith(self, symbol: bytes) -> bool:
        return self.data.startswith(symbol, self._offset)

    def match(self, pattern) -> Optional[bytes]:
        """
        Match a compiled bytes pattern at the cursor and step past it.
        Patterns given here never cross a line terminator.
        """
        m = pattern.match(self.data, self._offset)
        if m is None or m.end() == self._offset:
            return None
        self._offset = m.end()
        return m.group(0)
