"""Buffered output of emitted qualified names."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import List, Optional, TextIO

from .logging import get_logger


class NameSink:
    """Collects qualified names in emission order and writes them once."""

    def __init__(self) -> None:
        self._lines: List[str] = []
        self.logger = get_logger("sink")

    def write_line(self, name: str) -> None:
        self._lines.append(name)

    def __call__(self, name: str) -> None:
        self.write_line(name)

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def names(self) -> List[str]:
        return list(self._lines)

    def get_text(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)

    def commit(self, path: Path, *, mirror: Optional[TextIO] = None) -> Path:
        """Atomically write the buffered names to ``path`` and echo them to ``mirror``."""
        text = self.get_text()
        target = Path(path)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(text)
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        self.logger.debug("Wrote %d names to %s", len(self._lines), target)

        if mirror is not None:
            mirror.write(text)
            mirror.flush()
        return target


__all__ = ["NameSink"]
