"""Parse RBS::Inline annotations out of comment blocks.

Comments on consecutive lines that start at the same column form one block,
which is what RBS::Inline attaches to the following declaration. Inside a
block, an `@rbs` line owns every following line indented deeper than itself.
"""
import re
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from rbs_inline_lint.errors import RBSSyntaxError
from rbs_inline_lint.model import Comment
from rbs_inline_lint.rbs import Parser, TypeParam

T = TypeVar("T")

RBS_MARKER_RE = re.compile(r"\A(?P<indent>\s*)@rbs(?P<bang>!)?(?=\s|\Z)")
IVAR_RE = re.compile(r"\A\s*(?P<name>(?:self\.)?@@?[A-Za-z_]\w*)\s*:(?!:)")
BLOCK_RE = re.compile(r"\A\s*(?P<name>&[A-Za-z_]?\w*)\s*:(?!:)")
SPLAT_RE = re.compile(r"\A\s*(?P<name>\*\*?(?:[A-Za-z_]\w*)?)\s*:(?!:)")
PARAM_RE = re.compile(r"\A\s*(?P<name>[a-z_]\w*[?!]?)\s*:(?!:)")
# `@rbs name Type`: a name with the separator missing. The type is not parsed.
BARE_NAME_RE = re.compile(r"\A\s*(?P<name>(?!(?:yields|override|skip)\b)[a-z_]\w*[?!]?)(?=\s|\Z)")
MARKER_KEYWORD_RE = re.compile(r"\A\s*(?P<keyword>override|skip)\s*(?:--.*)?\Z", re.S)
KEYWORD_RE = re.compile(r"\A\s*(?P<keyword>inherits|use|module-self|generic|module|class)(?=\s|\Z)")
METHOD_TYPE_RE = re.compile(r"\A\s*(?:[(\[{?^]|->)")
ANNOTATION_RE = re.compile(r"\A\s*%a")


@dataclass(frozen=True)
class Annotation:
    comments: Tuple[Comment, ...]
    signature: str
    error: Optional[RBSSyntaxError]


@dataclass(frozen=True)
class NamedAnnotation(Annotation):
    name: str
    name_offset: int
    type: Optional[str]


class ParamType(NamedAnnotation):
    """`@rbs name: T`, including `*rest: T` and `**opts: T`."""


class IvarType(NamedAnnotation):
    """`@rbs @ivar: T`."""


class BlockType(NamedAnnotation):
    """`@rbs &block: () -> void`."""


class ReturnType(NamedAnnotation):
    """`@rbs return: T`."""


@dataclass(frozen=True)
class Override(Annotation):
    pass


@dataclass(frozen=True)
class Skip(Annotation):
    pass


@dataclass(frozen=True)
class Inherits(Annotation):
    super_class: Optional[str]


@dataclass(frozen=True)
class Use(Annotation):
    clauses: Tuple[str, ...]


@dataclass(frozen=True)
class ModuleSelf(Annotation):
    self_types: Tuple[str, ...]


@dataclass(frozen=True)
class Generic(Annotation):
    type_param: Optional[TypeParam]


@dataclass(frozen=True)
class ModuleDecl(Annotation):
    head: Optional[str]


@dataclass(frozen=True)
class ClassDecl(Annotation):
    head: Optional[str]


@dataclass(frozen=True)
class RBSAnnotation(Annotation):
    annotations: Tuple[str, ...]


@dataclass(frozen=True)
class MethodType(Annotation):
    annotations: Tuple[str, ...]
    method_types: Tuple[str, ...]


@dataclass(frozen=True)
class EmbeddedRBS(Annotation):
    declarations: int


@dataclass(frozen=True)
class MethodTypeAssertion(Annotation):
    method_type: str


@dataclass(frozen=True)
class TypeAssertion(Annotation):
    type: str


@dataclass(frozen=True)
class Application(Annotation):
    types: Tuple[str, ...]


@dataclass(frozen=True)
class SyntaxErrorAnnotation(Annotation):
    pass


@dataclass(frozen=True)
class ParsingResult:
    comments: Tuple[Comment, ...]
    annotations: Tuple[Annotation, ...]

    @property
    def last_line(self) -> int:
        return self.comments[-1].line

    @property
    def leading(self) -> bool:
        """True when no comment in the block trails code on its line."""
        return not any(comment.inline for comment in self.comments)

    @property
    def errors(self) -> List[Annotation]:
        return [annotation for annotation in self.annotations if annotation.error is not None]

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self.annotations)


class _Unit(object):
    """Annotation text gathered from one or more comment lines."""

    def __init__(self, comment: Comment, text: str, byte_offset: int) -> None:
        self.comments = [comment]
        self.text = text
        self._segments = [(0, len(text.encode("utf-8")), byte_offset)]

    def extend(self, comment: Comment, text: str, byte_offset: int) -> None:
        start = len(self.text.encode("utf-8")) + 1
        self.comments.append(comment)
        self.text = f"{self.text}\n{text}"
        self._segments.append((start, len(text.encode("utf-8")), byte_offset))

    def file_offset(self, offset: int) -> int:
        """Map a byte offset within the unit text to a file byte offset."""
        for start, length, file_start in self._segments:
            if offset <= start + length:
                return file_start + max(offset - start, 0)
        start, length, file_start = self._segments[-1]
        return file_start + length

    def masked(self, end: int) -> "_Unit":
        """Copy of the unit with the first `end` characters blanked out."""
        blank = " " * len(self.text[:end].encode("utf-8"))
        copy = _Unit(self.comments[0], blank + self.text[end:], 0)
        copy.comments = list(self.comments)
        copy._segments = list(self._segments)
        return copy

    def char_to_file_offset(self, index: int) -> int:
        return self.file_offset(len(self.text[:index].encode("utf-8")))

    def relocate(self, error: RBSSyntaxError) -> RBSSyntaxError:
        start = self.file_offset(error.offset)
        end = self.file_offset(error.offset + error.length)
        return RBSSyntaxError(error.message, start, max(end - start, 0))


def group_comments(comments: Sequence[Comment]) -> List[List[Comment]]:
    """Split comments into blocks of consecutive, equally indented, own-line comments."""
    blocks: List[List[Comment]] = []
    for comment in comments:
        if blocks and not comment.inline:
            last = blocks[-1][-1]
            if not last.inline and last.line + 1 == comment.line and last.column == comment.column:
                blocks[-1].append(comment)
                continue
        blocks.append([comment])
    return blocks


def _indent(text: str) -> int:
    return len(text) - len(text.lstrip())


def _units(block: Sequence[Comment]) -> Iterator[Tuple[str, _Unit]]:
    current: Optional[_Unit] = None
    current_kind = ""
    indent = 0
    for comment in block:
        body = comment.body
        body_offset = comment.byte_start + 1
        marker = RBS_MARKER_RE.match(body)
        if current is not None and not marker and not body.startswith(":"):
            if not body.strip() or _indent(body) > indent:
                current.extend(comment, body, body_offset)
                continue
        if current is not None:
            yield current_kind, current
            current = None
        if marker:
            indent = len(marker.group("indent"))
            current_kind = "embedded" if marker.group("bang") else "rbs"
            rest = body[marker.end() :]
            current = _Unit(comment, rest, body_offset + len(body[: marker.end()].encode("utf-8")))
        elif body.startswith(":"):
            yield "assertion", _Unit(comment, body[1:], body_offset + 1)
        elif body.startswith("[") and comment.inline and len(block) == 1:
            yield "application", _Unit(comment, body, body_offset)
    if current is not None:
        yield current_kind, current


def _trailing_text(parser: Parser, lenient: bool) -> None:
    """Allow a `-- comment` (or, when lenient, any text) after the payload."""
    if parser.at_end() or lenient:
        return
    token = parser.peek()
    if token.kind == "-" and parser.data[token.start : token.start + 2] == b"--":
        return
    raise parser.error("end of input")


def _attempt(
    unit: _Unit, parse: Callable[[Parser], T], lenient: bool = False
) -> Tuple[Optional[T], Optional[RBSSyntaxError]]:
    parser = Parser(unit.text)
    try:
        value = parse(parser)
        _trailing_text(parser, lenient)
    except RBSSyntaxError as e:
        return None, unit.relocate(e)
    return value, None


def _named(
    unit: _Unit, cls: type, matched: "re.Match[str]", parse: Callable[[Parser], str]
) -> Annotation:
    name_offset = unit.char_to_file_offset(matched.start("name"))
    value, error = _attempt(unit.masked(matched.end()), parse, lenient=True)
    signature = unit.text[matched.end() :].strip()
    return cls(tuple(unit.comments), signature, error, matched.group("name"), name_offset, value)


def _parse_rbs(unit: _Unit) -> Optional[Annotation]:
    text = unit.text
    comments = tuple(unit.comments)

    matched = IVAR_RE.match(text)
    if matched:
        return _named(unit, IvarType, matched, Parser.parse_type)
    matched = BLOCK_RE.match(text)
    if matched:
        return _named(unit, BlockType, matched, Parser.parse_block_signature)
    matched = SPLAT_RE.match(text)
    if matched:
        return _named(unit, ParamType, matched, Parser.parse_type)
    matched = PARAM_RE.match(text)
    if matched:
        cls = ReturnType if matched.group("name") == "return" else ParamType
        return _named(unit, cls, matched, Parser.parse_type)

    matched = MARKER_KEYWORD_RE.match(text)
    if matched:
        if matched.group("keyword") == "override":
            return Override(comments, text.strip(), None)
        return Skip(comments, text.strip(), None)

    matched = KEYWORD_RE.match(text)
    if matched:
        keyword = matched.group("keyword")
        payload = unit.masked(matched.end())
        signature = text[matched.end() :].strip()
        if keyword == "inherits":
            value, error = _attempt(payload, Parser.parse_class_reference)
            return Inherits(comments, signature, error, value)
        if keyword == "use":
            clauses, error = _attempt(payload, Parser.parse_use_clauses)
            return Use(comments, signature, error, tuple(clauses or ()))
        if keyword == "module-self":
            self_types, error = _attempt(payload, Parser.parse_self_types)
            return ModuleSelf(comments, signature, error, tuple(self_types or ()))
        if keyword == "generic":
            type_param, error = _attempt(payload, Parser.parse_type_param)
            return Generic(comments, signature, error, type_param)
        if keyword == "module":
            head, error = _attempt(payload, Parser.parse_module_head)
            return ModuleDecl(comments, signature, error, head)
        head, error = _attempt(payload, Parser.parse_class_head)
        return ClassDecl(comments, signature, error, head)

    if ANNOTATION_RE.match(text) or METHOD_TYPE_RE.match(text):
        parser = Parser(text)
        try:
            annotations = tuple(parser.annotations())
            if parser.at_end():
                return RBSAnnotation(comments, text.strip(), None, annotations)
            method_types = tuple(parser.parse_method_types())
            _trailing_text(parser, lenient=False)
        except RBSSyntaxError as e:
            return MethodType(comments, text.strip(), unit.relocate(e), (), ())
        return MethodType(comments, text.strip(), None, annotations, method_types)

    matched = BARE_NAME_RE.match(text)
    if matched:
        cls = ReturnType if matched.group("name") == "return" else ParamType
        name_offset = unit.char_to_file_offset(matched.start("name"))
        signature = text[matched.end() :].strip()
        return cls(comments, signature, None, matched.group("name"), name_offset, None)
    return None


def _parse_assertion(unit: _Unit) -> Annotation:
    comments = tuple(unit.comments)
    signature = unit.text.strip()
    method_type, method_error = _attempt(unit, Parser.parse_method_type)
    if method_error is None:
        return MethodTypeAssertion(comments, signature, None, method_type)
    type_, type_error = _attempt(unit, Parser.parse_type)
    if type_error is None:
        return TypeAssertion(comments, signature, None, type_)
    error = method_error if method_error.offset >= type_error.offset else type_error
    return SyntaxErrorAnnotation(comments, signature, error)


def _parse_unit(kind: str, unit: _Unit) -> Optional[Annotation]:
    if kind == "rbs":
        return _parse_rbs(unit)
    if kind == "embedded":
        count, error = _attempt(unit, Parser.parse_declarations)
        return EmbeddedRBS(tuple(unit.comments), unit.text.strip(), error, count or 0)
    if kind == "assertion":
        return _parse_assertion(unit)
    types, error = _attempt(unit, Parser.parse_type_list)
    return Application(tuple(unit.comments), unit.text.strip(), error, tuple(types or ()))


def parse_block(block: Sequence[Comment]) -> ParsingResult:
    annotations = []
    for kind, unit in _units(block):
        annotation = _parse_unit(kind, unit)
        if annotation is not None:
            annotations.append(annotation)
    return ParsingResult(tuple(block), tuple(annotations))


def parse_comments(comments: Sequence[Comment]) -> List[ParsingResult]:
    """Group comments into blocks and parse the annotations in each."""
    return [parse_block(block) for block in group_comments(comments)]
