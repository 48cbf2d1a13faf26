"""Helpers for writing rules."""
from typing import Optional, Sequence

from rbs_inline_lint.annotations import ParsingResult
from rbs_inline_lint.keywords import METHOD_DEFINITION_RE
from rbs_inline_lint.model import Comment, Range, SourceUnit


def byte_range(source: SourceUnit, start: int, end: int) -> Range:
    """Convert a file byte range into a character range."""
    return Range(source.character_offset(start), source.character_offset(end))


def clamp(target: Range, bounds: Range) -> Range:
    start = min(max(target.start, bounds.start), bounds.end)
    end = min(max(target.end, start), bounds.end)
    return Range(start, end)


def comment_at(comments: Sequence[Comment], offset: int) -> Comment:
    """Return the comment containing a character offset, or the last one."""
    for comment in comments:
        if comment.start <= offset <= comment.end:
            return comment
    return comments[-1]


def leading_block(results: Sequence[ParsingResult], line: int) -> Optional[ParsingResult]:
    """Return the annotation block that ends directly above the given line."""
    for result in results:
        if result.leading and result.last_line == line - 1:
            return result
    return None


def blank_line(source: SourceUnit, number: int) -> bool:
    """True for whitespace-only lines and for lines past the end of the file."""
    line = source.line(number)
    return line is None or not line.strip()


def method_definition_line(source: SourceUnit, number: int) -> bool:
    line = source.line(number)
    return line is not None and METHOD_DEFINITION_RE.match(line.strip()) is not None
