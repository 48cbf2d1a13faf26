"""Ruby source handling: comment scanning and method declaration discovery.

This is not a Ruby parser. It lexes just enough of the language (strings,
interpolation, heredocs, percent literals, regexps and embedded documents)
to tell a real `#` comment from a `#` inside a literal, and to find `def`
keywords in code.
"""
import os
import re
from bisect import bisect_right
from typing import List, Optional, Sequence, Tuple, Union

import structlog

from rbs_inline_lint.errors import SourceError
from rbs_inline_lint.model import Comment, Declaration, Parameter, ParameterKind, Range

LOGGER = structlog.get_logger(__name__)

PAIRED_DELIMITERS = {"(": ")", "[": "]", "{": "}", "<": ">"}
INTERPOLATING_PERCENT = {"Q", "W", "I", "r", "x", ""}
VALUE_KEYWORDS = {
    "and",
    "case",
    "do",
    "else",
    "elsif",
    "if",
    "in",
    "not",
    "or",
    "p",
    "puts",
    "return",
    "then",
    "unless",
    "until",
    "when",
    "while",
    "yield",
}
VALUE_PUNCTUATION = set("([{,;=|&!?:+-*/%<>~^")

HEREDOC_RE = re.compile(r"<<([~-]?)([\"'`]?)([A-Za-z_]\w*)\2")
PERCENT_RE = re.compile(r"%([qQwWiIrsx]?)([^\w\s=])")
WORD_BEFORE_RE = re.compile(r"([A-Za-z_]\w*[?!]?)\s*$")
DEF_RE = re.compile(
    r"(?<![\w.:$@])def[ \t]+"
    r"(?:(?:self|[A-Z]\w*(?:::[A-Z]\w*)*|[a-z_]\w*)[ \t]*\.[ \t]*)?"
    r"(?P<name>[A-Za-z_]\w*[?!=]?|===?|=~|!=|!~|<=>|<<|>>|<=|>=|\*\*|\[\]=?|[+\-~!]@?|[*/%<>&|^`])"
)
KEYWORD_PARAM_RE = re.compile(r"\A([A-Za-z_]\w*)\s*:(?!:)(.*)\Z", re.S)
OPTIONAL_PARAM_RE = re.compile(r"\A([A-Za-z_]\w*)\s*=")
REQUIRED_PARAM_RE = re.compile(r"\A([A-Za-z_]\w*)\Z")


class _Code(object):
    """Code mode; `depth` counts braces when nested inside `#{...}`."""

    def __init__(self, interpolation: bool = False) -> None:
        self.interpolation = interpolation
        self.depth = 0


class _Literal(object):
    def __init__(self, opener: str, closer: str, interpolate: bool) -> None:
        self.opener = opener
        self.closer = closer
        self.interpolate = interpolate
        self.nesting = 0


_Mode = Union[_Code, _Literal]


class _Heredoc(object):
    def __init__(self, flag: str, terminator: str) -> None:
        self.indented = flag in ("~", "-")
        self.terminator = terminator


class _Lexer(object):
    """Line oriented lexer producing masked code lines and comment positions."""

    def __init__(self, lines: Sequence[str]) -> None:
        self._lines = lines
        self._stack: List[_Mode] = [_Code()]
        self.masked: List[str] = []
        self.comments: List[Tuple[int, int]] = []

    def run(self) -> None:
        pending: List[_Heredoc] = []
        heredoc: Optional[_Heredoc] = None
        in_embdoc = False
        ended = False
        for index, line in enumerate(self._lines):
            if ended:
                self.masked.append(" " * len(line))
                continue
            if heredoc is not None:
                self.masked.append(" " * len(line))
                body = line.rstrip("\r")
                if heredoc.indented:
                    body = body.strip()
                if body == heredoc.terminator:
                    heredoc = pending.pop(0) if pending else None
                continue
            if in_embdoc:
                self.masked.append(" " * len(line))
                if line.startswith("=end"):
                    in_embdoc = False
                continue
            at_top = len(self._stack) == 1 and isinstance(self._stack[0], _Code)
            if at_top and line.startswith("=begin"):
                in_embdoc = True
                self.masked.append(" " * len(line))
                continue
            if at_top and line.rstrip("\r") == "__END__":
                ended = True
                self.masked.append(" " * len(line))
                continue
            pending.extend(self._scan_line(index, line))
            if pending and heredoc is None:
                heredoc = pending.pop(0)

    def _scan_line(self, index: int, line: str) -> List[_Heredoc]:
        out = list(line)
        heredocs: List[_Heredoc] = []
        i = 0
        length = len(line)
        while i < length:
            mode = self._stack[-1]
            ch = line[i]
            if isinstance(mode, _Literal):
                out[i] = " "
                if ch == "\\":
                    if i + 1 < length:
                        out[i + 1] = " "
                    i += 2
                    continue
                if mode.interpolate and ch == "#" and line[i + 1 : i + 2] == "{":
                    out[i + 1] = " "
                    self._stack.append(_Code(interpolation=True))
                    i += 2
                    continue
                if ch == mode.closer and mode.nesting == 0:
                    out[i] = ch
                    self._stack.pop()
                elif ch == mode.closer:
                    mode.nesting -= 1
                elif ch == mode.opener and mode.opener != mode.closer:
                    mode.nesting += 1
                i += 1
                continue

            if ch == "#":
                self.comments.append((index, i))
                for j in range(i, length):
                    out[j] = " "
                break
            if ch == "{":
                mode.depth += 1
            elif ch == "}":
                if mode.interpolation and mode.depth == 0:
                    self._stack.pop()
                    out[i] = " "
                    i += 1
                    continue
                mode.depth -= 1
            elif ch == "$" and i + 1 < length and line[i + 1] in "'\"`/\\;,.<>!@~&*?:=$0":
                i += 2
                continue
            elif ch in ("\"", "'", "`"):
                self._stack.append(_Literal(ch, ch, ch != "'"))
                i += 1
                continue
            elif ch == "<" and line.startswith("<<", i):
                prefix = "".join(out[:i])
                matched = HEREDOC_RE.match(line, i)
                if matched and self._heredoc_allowed(prefix, line, i, matched):
                    heredocs.append(_Heredoc(matched.group(1), matched.group(3)))
                    i = matched.end()
                    continue
            elif ch == "%" and self._literal_allowed("".join(out[:i]), line, i):
                matched = PERCENT_RE.match(line, i)
                if matched:
                    opener = matched.group(2)
                    closer = PAIRED_DELIMITERS.get(opener, opener)
                    interpolate = matched.group(1) in INTERPOLATING_PERCENT
                    self._stack.append(_Literal(opener, closer, interpolate))
                    i = matched.end()
                    continue
            elif ch == "/" and self._regexp_allowed("".join(out[:i]), line, i):
                self._stack.append(_Literal("/", "/", True))
                i += 1
                continue
            elif ch == "?" and self._literal_allowed("".join(out[:i]), line, i) and i + 1 < length:
                skip = 3 if line[i + 1] == "\\" else 2
                following = line[i + skip : i + skip + 1]
                if not (following.isalnum() or following == "_"):
                    for j in range(i + 1, min(i + skip, length)):
                        out[j] = " "
                    i += skip
                    continue
            i += 1
        self.masked.append("".join(out))
        return heredocs

    @staticmethod
    def _value_expected(prefix: str) -> bool:
        stripped = prefix.rstrip()
        if not stripped:
            return True
        if stripped[-1] in VALUE_PUNCTUATION:
            return True
        word = WORD_BEFORE_RE.search(stripped)
        return bool(word and word.group(1) in VALUE_KEYWORDS)

    def _literal_allowed(self, prefix: str, line: str, i: int) -> bool:
        if self._value_expected(prefix):
            return True
        # `foo /bar/` and `foo %w[a]` read as arguments to a method call.
        spaced_before = prefix[-1:].isspace()
        spaced_after = line[i + 1 : i + 2].isspace() or i + 1 >= len(line)
        previous = prefix.rstrip()[-1:]
        return spaced_before and not spaced_after and (previous.isalnum() or previous == "_")

    def _regexp_allowed(self, prefix: str, line: str, i: int) -> bool:
        if self._value_expected(prefix):
            return True
        # `grep /a/` is an argument, `count /2` a division. Only the former
        # closes on the same line.
        return self._literal_allowed(prefix, line, i) and _closes_on_line(line, i + 1)

    def _heredoc_allowed(self, prefix: str, line: str, i: int, matched: "re.Match[str]") -> bool:
        if matched.group(1) or matched.group(2):
            return True
        return matched.group(3)[0].isupper() and self._literal_allowed(prefix, line, i + 1)


def _closes_on_line(line: str, start: int) -> bool:
    i = start
    while i < len(line):
        if line[i] == "\\":
            i += 2
            continue
        if line[i] == "/":
            return True
        i += 1
    return False


def _split_top_level(text: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in text:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [part.strip() for part in parts]


def parse_parameters(text: str) -> Tuple[Parameter, ...]:
    """Classify a method's parameter list, given the text between its parentheses."""
    parameters: List[Parameter] = []
    for part in _split_top_level(" ".join(text.split())):
        if not part:
            continue
        if part == "...":
            parameters.append(Parameter("...", ParameterKind.FORWARD))
        elif part.startswith("&"):
            parameters.append(Parameter(part[1:].strip() or None, ParameterKind.BLOCK))
        elif part.startswith("**"):
            name = part[2:].strip()
            if name != "nil":
                parameters.append(Parameter(name or None, ParameterKind.KEYWORD_REST))
        elif part.startswith("*"):
            parameters.append(Parameter(part[1:].strip() or None, ParameterKind.REST))
        elif part.startswith("(") and part.endswith(")"):
            for nested in parse_parameters(part[1:-1]):
                if nested.name and nested.kind != ParameterKind.FORWARD:
                    parameters.append(Parameter(nested.name, ParameterKind.REQUIRED))
        else:
            keyword = KEYWORD_PARAM_RE.match(part)
            if keyword:
                kind = ParameterKind.KEYWORD
                if keyword.group(2).strip():
                    kind = ParameterKind.OPTIONAL_KEYWORD
                parameters.append(Parameter(keyword.group(1), kind))
                continue
            optional = OPTIONAL_PARAM_RE.match(part)
            if optional:
                parameters.append(Parameter(optional.group(1), ParameterKind.OPTIONAL))
                continue
            required = REQUIRED_PARAM_RE.match(part)
            if required:
                parameters.append(Parameter(required.group(1), ParameterKind.REQUIRED))
    return tuple(parameters)


def _matching_paren(text: str, start: int) -> int:
    depth = 0
    for i in range(start, len(text)):
        if text[i] in "([{":
            depth += 1
        elif text[i] in ")]}":
            depth -= 1
            if depth == 0:
                return i
    return len(text)


class RubySource(object):
    """A Ruby file, scanned once for comments and method declarations."""

    def __init__(self, text: str, path: str = "(string)") -> None:
        self._path = path
        self._text = text
        self._lines = text.split("\n")

        self._line_starts: List[int] = []
        self._line_byte_starts: List[int] = []
        offset = 0
        byte_offset = 0
        for line in self._lines:
            self._line_starts.append(offset)
            self._line_byte_starts.append(byte_offset)
            offset += len(line) + 1
            byte_offset += len(line.encode("utf-8")) + 1

        # Byte offsets at which a multi-byte character ends, with the running
        # count of extra bytes up to that point.
        self._multibyte_ends: List[int] = []
        self._multibyte_extra: List[int] = []
        byte_offset = 0
        extra = 0
        for ch in text:
            size = len(ch.encode("utf-8"))
            byte_offset += size
            if size > 1:
                extra += size - 1
                self._multibyte_ends.append(byte_offset)
                self._multibyte_extra.append(extra)

        lexer = _Lexer(self._lines)
        lexer.run()
        self._masked = "\n".join(lexer.masked)
        self._comments = tuple(
            self._build_comment(index, column) for index, column in lexer.comments
        )
        self._declarations = tuple(self._scan_declarations())

    @property
    def path(self) -> str:
        return self._path

    @property
    def text(self) -> str:
        return self._text

    def comments(self) -> Sequence[Comment]:
        return self._comments

    def declarations(self) -> Sequence[Declaration]:
        return self._declarations

    def line(self, number: int) -> Optional[str]:
        if number < 1 or number > len(self._lines):
            return None
        return self._lines[number - 1].rstrip("\r")

    def line_range(self, number: int) -> Range:
        start = self._line_starts[number - 1]
        return Range(start, start + len(self._lines[number - 1].rstrip("\r")))

    def character_offset(self, byte_offset: int) -> int:
        index = bisect_right(self._multibyte_ends, byte_offset)
        if index == 0:
            return byte_offset
        return byte_offset - self._multibyte_extra[index - 1]

    def location(self, offset: int) -> Tuple[int, int]:
        index = bisect_right(self._line_starts, offset) - 1
        return index + 1, offset - self._line_starts[index] + 1

    def _build_comment(self, index: int, column: int) -> Comment:
        line = self._lines[index].rstrip("\r")
        line_start = self._line_starts[index]
        line_byte_start = self._line_byte_starts[index]
        text = line[column:]
        byte_start = line_byte_start + len(line[:column].encode("utf-8"))
        return Comment(
            text=text,
            start=line_start + column,
            end=line_start + len(line),
            byte_start=byte_start,
            byte_end=byte_start + len(text.encode("utf-8")),
            line=index + 1,
            column=column,
            inline=bool(line[:column].strip()),
        )

    def _scan_declarations(self) -> List[Declaration]:
        masked = self._masked
        declarations = []
        for matched in DEF_RE.finditer(masked):
            position = matched.end()
            while position < len(masked) and masked[position] in " \t":
                position += 1
            params_text = ""
            line, _ = self.location(matched.start())
            end_line = line
            following = masked[position : position + 1]
            if following == "(":
                close = _matching_paren(masked, position)
                params_text = masked[position + 1 : close]
                end_line, _ = self.location(min(close, len(masked)))
            elif following and following not in "\n;=\r":
                end = len(masked)
                for stop in ("\n", ";"):
                    found = masked.find(stop, position)
                    if found != -1:
                        end = min(end, found)
                params_text = masked[position:end]
            declarations.append(
                Declaration(
                    name=matched.group("name"),
                    line=line,
                    parameters_end_line=end_line,
                    parameters=parse_parameters(params_text),
                )
            )
        return declarations


def load(text: str, path: str = "(string)") -> RubySource:
    """Scan Ruby source held in memory."""
    return RubySource(text, path)


def load_file(ruby_file: Union[str, os.PathLike]) -> RubySource:
    """Load and scan a Ruby file from disk."""
    path = os.fspath(ruby_file)
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as e:
        raise SourceError(path, str(e))
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SourceError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})")
    source = RubySource(text, path)
    LOGGER.debug(
        "Scanned source",
        path=path,
        comments=len(source.comments()),
        declarations=len(source.declarations()),
    )
    return source
