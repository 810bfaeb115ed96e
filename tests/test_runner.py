"""Tests for externgen.runner."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from externgen.errors import SemanticModelError
from externgen.models import SymbolFlags
from externgen.runner import ExternRunner, derive_output_path
from tests._fixtures.model_builder import ModelBuilder, ref


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("lib.d.ts", "lib.d.externs"),
        ("api.ts", "api.externs"),
        ("noext", "noext.externs"),
        ("dir.v2/types", "dir.v2/types.externs"),
    ],
)
def test_derive_output_path(source: str, expected: str) -> None:
    assert derive_output_path(Path(source)) == Path(expected)


def test_derive_output_path_custom_extension() -> None:
    assert derive_output_path(Path("a.d.ts"), ".txt") == Path("a.d.txt")


def test_runner_writes_walk_output(tmp_path: Path, model_builder: ModelBuilder) -> None:
    root = model_builder.root("A")
    model_builder.export(root, "b", SymbolFlags.VARIABLE, type_ref=ref("I"))
    iface = model_builder.export(root, "I", SymbolFlags.INTERFACE)
    model_builder.member(iface, "x")
    model = model_builder.build()
    mirror = io.StringIO()
    seen = []

    def _loader(path: Path):
        seen.append(path)
        return model

    runner = ExternRunner(_loader, mirror=mirror)
    result = runner.run(tmp_path / "api.d.ts")

    assert seen == [tmp_path / "api.d.ts"]
    assert result.output_path == tmp_path / "api.d.externs"
    assert result.names == ["A.I.x", "A.b.x"]
    assert result.stats.emitted == 2
    assert result.stats.reentries == 1
    assert result.output_path.read_text(encoding="utf-8") == "A.I.x\nA.b.x\n"
    assert mirror.getvalue() == "A.I.x\nA.b.x\n"


def test_runner_honours_explicit_output(tmp_path: Path, model_builder: ModelBuilder) -> None:
    model_builder.root("solo", SymbolFlags.FUNCTION)
    model = model_builder.build()
    runner = ExternRunner(lambda _path: model, output_extension=".ext")

    result = runner.run(tmp_path / "in.d.ts", tmp_path / "chosen.txt")

    assert result.output_path == tmp_path / "chosen.txt"
    assert (tmp_path / "chosen.txt").read_text(encoding="utf-8") == "solo\n"
    assert not (tmp_path / "in.d.ext").exists()


def test_runner_leaves_no_output_when_model_fails(tmp_path: Path) -> None:
    def _loader(path: Path):
        raise SemanticModelError(f"Cannot read {path}")

    runner = ExternRunner(_loader)

    with pytest.raises(SemanticModelError):
        runner.run(tmp_path / "broken.d.ts")

    assert list(tmp_path.iterdir()) == []
