"""Locate the managed block inside a config file's text"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BlockSpan:
    """Offsets of a managed block; ``end`` is the last marker character"""
    start: int
    end: int


def locate_block(text: str, start_marker: str, end_marker: str) -> Optional[BlockSpan]:
    """Find the first start marker and the first end marker after it.

    Both markers must be present, start before end. If the file holds more
    than one block only the first pair counts; later copies are left alone.
    """
    start = text.find(start_marker)
    if start == -1:
        return None
    end = text.find(end_marker, start + len(start_marker))
    if end == -1:
        return None
    return BlockSpan(start=start, end=end + len(end_marker) - 1)


def block_text(text: str, span: Optional[BlockSpan]) -> str:
    return text[span.start:span.end + 1] if span else ""


def remove_block(text: str, span: Optional[BlockSpan]) -> str:
    """Cut exactly the located span out of the text"""
    if span is None:
        return text
    return text[:span.start] + text[span.end + 1:]
