from __future__ import annotations

from typing import Iterator

from .spec import Literal, Logic, Segment


def split_segments(source: str, open_tag: str, close_tag: str) -> Iterator[Segment]:
    """Cut template source into literal and logic segments.

    Tags are plain substrings and do not nest. The text before the first
    open tag is always a literal. A chunk without a close tag is literal
    text, dangling open tag included, so an unterminated tag renders
    verbatim instead of failing.
    """
    for i, chunk in enumerate(source.split(open_tag)):
        logic, found, rest = chunk.partition(close_tag)

        if i == 0:
            yield Literal(chunk)
        elif not found:
            yield Literal(open_tag + chunk)
        else:
            yield Logic(logic)
            if rest:
                yield Literal(rest)
