from __future__ import annotations

import io
from typing import List, TextIO


def _escape_table() -> List[str]:
    table = []
    for byte in range(256):
        if byte == ord("\\"):
            table.append("\\\\")
        elif byte == ord('"'):
            table.append('\\"')
        elif byte == ord("\n"):
            table.append("\\n")
        elif 0x20 <= byte < 0x7F:
            table.append(chr(byte))
        else:
            table.append(f"\\x{byte:02x}")
    return table


_ESCAPES = _escape_table()


class EscapingWriter(io.RawIOBase):
    """Binary sink that writes what it receives as Python bytes literals.

    Output is split into adjacent ``b"..."`` literals of at most ``width``
    escaped characters, one per line, each prefixed with ``indent``. An escape
    sequence is never split across literals. Call :meth:`finish` to close the
    last literal.
    """

    def __init__(self, out: TextIO, *, indent: str = "", width: int = 76):
        super().__init__()
        if width <= 0:
            raise ValueError("width must be positive")
        self._out = out
        self._indent = indent
        self._width = width
        self._column = 0
        self._open = False
        self.bytes_written = 0

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        view = memoryview(data).cast("B")
        parts: List[str] = []
        for byte in view:
            escaped = _ESCAPES[byte]
            if not self._open:
                parts.append(f'{self._indent}b"')
                self._open = True
                self._column = 0
            elif self._column + len(escaped) > self._width:
                parts.append(f'"\n{self._indent}b"')
                self._column = 0
            parts.append(escaped)
            self._column += len(escaped)
        self._out.write("".join(parts))
        self.bytes_written += len(view)
        return len(view)

    def finish(self) -> None:
        if not self._open:
            # Nothing was written: still emit a valid, empty literal.
            self._out.write(f'{self._indent}b"')
        self._out.write('"')
        self._open = False
