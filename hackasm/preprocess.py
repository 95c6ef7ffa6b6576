from __future__ import annotations

from typing import Iterable, List

from hackasm.model import SourceLine


COMMENT_MARKER = "//"


def strip_line(raw: str) -> str:
    return raw.split(COMMENT_MARKER, 1)[0].strip()


def significant_lines(lines: Iterable[str]) -> List[SourceLine]:
    result: List[SourceLine] = []
    for idx, raw_line in enumerate(lines, start=1):
        text = strip_line(raw_line)
        if not text:
            continue
        result.append(SourceLine(line_no=idx, text=text))
    return result


def preprocess(lines: Iterable[str]) -> List[str]:
    return [line.text for line in significant_lines(lines)]
