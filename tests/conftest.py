from pathlib import Path

import pytest


LOOP_SOURCE = [
    "// counts down from R0",
    "@0",
    "D=M",
    "",
    "@LOOP",
    "D;JLE   // skip when done",
    "(LOOP)",
    "M=D",
    "@counter",
]


@pytest.fixture
def loop_source():
    return list(LOOP_SOURCE)


@pytest.fixture
def write_source(tmp_path: Path):
    def _write(lines, name: str = "prog.asm") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
