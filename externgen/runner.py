"""Pipeline that turns a declaration file into an externs file."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from .config import DEFAULT_OUTPUT_EXTENSION
from .logging import get_logger
from .semantic import SemanticModel, TreeSitterSemanticModel
from .sink import NameSink
from .walker import DeclarationWalker, WalkStats

ModelLoader = Callable[[Path], SemanticModel]


@dataclass
class RunResult:
    """Outcome of a single externs generation run."""

    input_path: Path
    output_path: Path
    names: List[str]
    stats: WalkStats


def derive_output_path(input_path: Path, extension: str = DEFAULT_OUTPUT_EXTENSION) -> Path:
    """Replace the final suffix of ``input_path`` with ``extension``.

    ``lib.d.ts`` becomes ``lib.d.externs``; a name without a suffix gets the
    extension appended.
    """
    stem, dot, _ = input_path.name.rpartition(".")
    base = stem if dot else input_path.name
    return input_path.with_name(f"{base}{extension}")


class ExternRunner:
    """Coordinates model binding, the walk and the final write."""

    def __init__(
        self,
        loader: ModelLoader | None = None,
        *,
        output_extension: str = DEFAULT_OUTPUT_EXTENSION,
        mirror: TextIO | None = None,
    ) -> None:
        self.loader = loader or TreeSitterSemanticModel.from_path
        self.output_extension = output_extension
        self.mirror = mirror
        self.logger = get_logger("runner")

    def run(self, input_path: Path, output_path: Optional[Path] = None) -> RunResult:
        input_path = Path(input_path)
        if output_path is None:
            output_path = derive_output_path(input_path, self.output_extension)
        output_path = Path(output_path)
        self.logger.info("generating %s from %s", output_path, input_path)

        model = self.loader(input_path)
        sink = NameSink()
        stats = DeclarationWalker(model).walk(sink)
        self.logger.debug("Collected %d names", len(sink))

        sink.commit(output_path, mirror=self.mirror)
        return RunResult(
            input_path=input_path,
            output_path=output_path,
            names=sink.names,
            stats=stats,
        )


__all__ = ["ExternRunner", "RunResult", "derive_output_path"]
