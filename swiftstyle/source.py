"""Source files — offset-addressed text buffers backed by an optional path."""

from __future__ import annotations

import bisect
import logging
import re
from pathlib import Path
from typing import Optional, Union

from swiftstyle.config import SOURCE_ENCODING
from swiftstyle.models import Location
from swiftstyle.syntax import SwiftSyntaxMap, SyntaxKind, SyntaxQuery

logger = logging.getLogger(__name__)

# (offset, length, syntax kinds overlapping the match)
RawMatch = tuple[int, int, list[SyntaxKind]]


class SourceFile:
    """The full text of one file plus the lookups rules need.

    Offsets are character offsets unless a method says otherwise. A syntax
    service can be injected; by default a SwiftSyntaxMap is built on first use
    and rebuilt whenever the contents change.
    """

    def __init__(
        self,
        contents: str,
        path: Optional[Union[str, Path]] = None,
        syntax: Optional[SyntaxQuery] = None,
    ) -> None:
        self.path = str(path) if path is not None else None
        self._injected_syntax = syntax
        self._set_contents(contents)

    @classmethod
    def from_path(cls, path: Union[str, Path], encoding: str = SOURCE_ENCODING) -> "SourceFile":
        """Load a file from disk, keeping its line endings. I/O errors propagate."""
        with open(path, encoding=encoding, newline="") as f:
            text = f.read()
        return cls(text, path=path)

    def _set_contents(self, contents: str) -> None:
        self._contents = contents
        self._syntax: Optional[SyntaxQuery] = self._injected_syntax
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", contents)]
        if contents.isascii():
            self._byte_starts: Optional[list[int]] = None
        else:
            # _byte_starts[i] is the byte offset of character i
            starts = [0]
            for char in contents:
                starts.append(starts[-1] + len(char.encode("utf-8")))
            self._byte_starts = starts

    @property
    def contents(self) -> str:
        return self._contents

    @property
    def syntax(self) -> SyntaxQuery:
        if self._syntax is None:
            self._syntax = SwiftSyntaxMap(self._contents, self.byte_offset)
        return self._syntax

    # ── Addressing ───────────────────────────────────────────────────────

    def substring(self, start: int, length: int) -> str:
        return self._contents[start : start + length]

    def char_at(self, index: Optional[int]) -> Optional[str]:
        """Character at ``index``, or None when outside the buffer."""
        if index is None or not 0 <= index < len(self._contents):
            return None
        return self._contents[index]

    def byte_offset(self, char_offset: int) -> int:
        if self._byte_starts is None:
            return char_offset
        char_offset = max(0, min(char_offset, len(self._contents)))
        return self._byte_starts[char_offset]

    def char_offset(self, byte_offset: int) -> int:
        """Character containing ``byte_offset`` (clamped to the buffer)."""
        if self._byte_starts is None:
            return max(0, min(byte_offset, len(self._contents)))
        index = bisect.bisect_right(self._byte_starts, byte_offset) - 1
        return max(0, min(index, len(self._contents)))

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_range(self, line: int) -> Optional[tuple[int, int]]:
        """Character span of a 1-based line including its newline."""
        if not 1 <= line <= self.line_count:
            return None
        start = self._line_starts[line - 1]
        end = self._line_starts[line] if line < self.line_count else len(self._contents)
        return start, end

    def line_number(self, char_offset: int) -> int:
        return bisect.bisect_right(self._line_starts, char_offset)

    def location(self, char_offset: int) -> Location:
        line = self.line_number(char_offset)
        column = char_offset - self._line_starts[line - 1] + 1
        return Location(file=self.path, line=line, column=column)

    # ── Matching ─────────────────────────────────────────────────────────

    def match(self, pattern: Union[str, re.Pattern]) -> list[RawMatch]:
        """All non-overlapping matches with the syntax kinds they cover."""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        matches: list[RawMatch] = []
        for m in regex.finditer(self._contents):
            if m.end() == m.start():
                continue
            kinds = self.syntax.kinds_in_range(m.start(), m.end())
            matches.append((m.start(), m.end() - m.start(), kinds))
        return matches

    # ── Persistence ──────────────────────────────────────────────────────

    def write(self, contents: str) -> None:
        """Replace the buffer and persist it when the file has a path.

        An injected syntax service describes the old text only, so it is
        dropped in favour of a freshly built SwiftSyntaxMap.
        """
        if self.path is not None:
            with open(self.path, "w", encoding=SOURCE_ENCODING, newline="") as f:
                f.write(contents)
            logger.info("Wrote %d characters to %s", len(contents), self.path)
        self._injected_syntax = None
        self._set_contents(contents)

    def __repr__(self) -> str:
        return f"SourceFile(path={self.path!r}, length={len(self._contents)})"
