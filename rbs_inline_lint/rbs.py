"""A recognizer for the RBS type language.

Covers the subset RBS::Inline annotations embed: types, method types, type
parameters, and the declarations allowed in `@rbs!` blocks. The parser works
on UTF-8 bytes so that every error carries a byte offset relative to the text
it was given, the same contract the upstream RBS parser has.
"""
import re
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

from rbs_inline_lint.errors import RBSSyntaxError

KEYWORDS = {
    "alias",
    "attr_accessor",
    "attr_reader",
    "attr_writer",
    "bool",
    "boolish",
    "bot",
    "class",
    "def",
    "end",
    "extend",
    "false",
    "in",
    "include",
    "instance",
    "interface",
    "module",
    "nil",
    "out",
    "prepend",
    "private",
    "public",
    "self",
    "singleton",
    "top",
    "true",
    "type",
    "unchecked",
    "untyped",
    "use",
    "void",
}
BASE_TYPES = {
    "bool",
    "boolish",
    "bot",
    "class",
    "instance",
    "nil",
    "self",
    "top",
    "untyped",
    "void",
}
LITERAL_TOKENS = {"INTEGER", "STRING", "SYMBOL", "true", "false"}
NAME_TOKENS = {"UIDENT", "LIDENT", "INTERFACE"}
ATTRIBUTE_KEYWORDS = {"attr_reader", "attr_writer", "attr_accessor"}
MIXIN_KEYWORDS = {"include", "extend", "prepend"}
DECLARATION_STARTS = {"type", "class", "module", "interface", "use", "UKEYWORD", "GLOBAL"}
OPERATOR_NAMES = {"OP", "+", "-", "*", "/", "%", "<", ">", "!", "~", "^", "&", "|", "**"}

_TOKEN_PATTERNS: Sequence[Tuple[str, "re.Pattern[bytes]"]] = (
    ("ANNOTATION", re.compile(rb"%a(?:\{[^}]*\}|\([^)]*\)|\[[^\]]*\]|<[^>]*>|\|[^|]*\|)")),
    ("OP", re.compile(rb"<=>|===|==|=~|!=|!~|<=|>=|<<|>>|[+\-!]@")),
    ("->", re.compile(rb"->")),
    ("=>", re.compile(rb"=>")),
    ("::", re.compile(rb"::")),
    ("**", re.compile(rb"\*\*")),
    ("...", re.compile(rb"\.\.\.")),
    ("LKEYWORD", re.compile(rb"[a-z_][A-Za-z0-9_]*[?!]?:(?!:)")),
    ("UKEYWORD", re.compile(rb"[A-Z][A-Za-z0-9_]*:(?!:)")),
    (
        "SYMBOL",
        re.compile(rb":(?:[A-Za-z_][A-Za-z0-9_]*[?!=]?|\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*')"),
    ),
    ("IVAR", re.compile(rb"@@?[A-Za-z_][A-Za-z0-9_]*")),
    ("GLOBAL", re.compile(rb"\$[A-Za-z_][A-Za-z0-9_]*")),
    ("INTERFACE", re.compile(rb"_[A-Z][A-Za-z0-9_]*")),
    ("UIDENT", re.compile(rb"[A-Z][A-Za-z0-9_]*")),
    ("LIDENT", re.compile(rb"[a-z_][A-Za-z0-9_]*")),
    ("INTEGER", re.compile(rb"-?[0-9][0-9_]*")),
    ("STRING", re.compile(rb"\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'")),
)
_PUNCTUATION = b"()[]{},|&^?*:<>=.!+-/%~"
_SKIP_RE = re.compile(rb"(?:[ \t\r\n]+|#[^\n]*)+")


class Token(NamedTuple):
    kind: str
    value: str
    start: int
    end: int


class TypeParam(NamedTuple):
    name: str
    variance: Optional[str] = None
    unchecked: bool = False
    upper_bound: Optional[str] = None
    default: Optional[str] = None


class Parser(object):
    """Recursive descent recognizer over one piece of RBS text."""

    def __init__(self, text: Union[str, bytes]) -> None:
        self.data = text.encode("utf-8") if isinstance(text, str) else text
        self._pos = 0
        self._buffer: List[Token] = []
        self.last_end = 0

    # Lexing

    def _lex(self) -> Token:
        skipped = _SKIP_RE.match(self.data, self._pos)
        if skipped:
            self._pos = skipped.end()
        start = self._pos
        if start >= len(self.data):
            return Token("EOF", "", start, start)
        for kind, pattern in _TOKEN_PATTERNS:
            matched = pattern.match(self.data, start)
            if matched:
                self._pos = matched.end()
                value = matched.group().decode("utf-8", errors="replace")
                if kind == "LIDENT" and value in KEYWORDS:
                    kind = value
                return Token(kind, value, start, self._pos)
        char = self.data[start : start + 1]
        if char in (b'"', b"'"):
            raise RBSSyntaxError("unterminated string literal", start, len(self.data) - start)
        if char in _PUNCTUATION:
            self._pos = start + 1
            return Token(char.decode(), char.decode(), start, self._pos)
        raise RBSSyntaxError(f"unexpected character {self._display(start)}", start, 1)

    def _display(self, start: int) -> str:
        return repr(self.data[start:].decode("utf-8", errors="replace")[:1])

    def peek(self, ahead: int = 0) -> Token:
        while len(self._buffer) <= ahead:
            if self._buffer and self._buffer[-1].kind == "EOF":
                return self._buffer[-1]
            self._buffer.append(self._lex())
        return self._buffer[ahead]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind != "EOF":
            self._buffer.pop(0)
            self.last_end = token.end
        return token

    def accept(self, *kinds: str) -> Optional[Token]:
        if self.peek().kind in kinds:
            return self.advance()
        return None

    def expect(self, kinds: Union[str, Tuple[str, ...]], expected: str) -> Token:
        if isinstance(kinds, str):
            kinds = (kinds,)
        token = self.accept(*kinds)
        if token is None:
            raise self.error(expected)
        return token

    def error(self, expected: str, token: Optional[Token] = None) -> RBSSyntaxError:
        token = token or self.peek()
        if token.kind == "EOF":
            return RBSSyntaxError(f"unexpected end of input, expected {expected}", token.start, 0)
        return RBSSyntaxError(
            f"unexpected token `{token.value}`, expected {expected}",
            token.start,
            token.end - token.start,
        )

    def at_end(self) -> bool:
        return self.peek().kind == "EOF"

    def expect_end(self) -> None:
        if not self.at_end():
            raise self.error("end of input")

    def text_since(self, start: int) -> str:
        return self.data[start : self.last_end].decode("utf-8", errors="replace")

    def annotations(self) -> List[str]:
        """Consume leading `%a{...}` annotations."""
        found = []
        while self.peek().kind == "ANNOTATION":
            found.append(self.advance().value)
        return found

    # Types

    def parse_type(self) -> str:
        start = self.peek().start
        self._intersection()
        while self.accept("|"):
            self._intersection()
        return self.text_since(start)

    def _intersection(self) -> None:
        self._optional()
        while self.accept("&"):
            self._optional()

    def _optional(self) -> None:
        self._simple()
        self.accept("?")

    def _simple(self) -> None:
        token = self.peek()
        kind = token.kind
        if kind == "(":
            self.advance()
            self.parse_type()
            self.expect(")", "`)`")
        elif kind == "^":
            self.advance()
            self._proc()
        elif kind == "[":
            self.advance()
            self._type_list("]")
        elif kind == "{":
            self.advance()
            self._record()
        elif kind == "singleton":
            self.advance()
            self.expect("(", "`(`")
            self.parse_type_name()
            self.expect(")", "`)`")
        elif kind in BASE_TYPES or kind in LITERAL_TOKENS:
            self.advance()
        elif kind in NAME_TOKENS or kind == "::":
            self.parse_type_name()
            if self.peek().kind == "[":
                self.advance()
                self._type_list("]", allow_empty=False)
        else:
            raise self.error("a type", token)

    def parse_type_name(self) -> str:
        start = self.peek().start
        self.accept("::")
        token = self.expect(tuple(NAME_TOKENS), "a type name")
        while token.kind == "UIDENT" and self.peek().kind == "::":
            self.advance()
            token = self.expect(tuple(NAME_TOKENS), "a type name")
        return self.text_since(start)

    def parse_class_name(self) -> str:
        start = self.peek().start
        self.accept("::")
        token = self.expect(("UIDENT", "INTERFACE"), "a class name")
        while token.kind == "UIDENT" and self.peek().kind == "::":
            self.advance()
            token = self.expect(("UIDENT", "INTERFACE"), "a class name")
        return self.text_since(start)

    def parse_class_reference(self) -> str:
        """A class or interface name with optional type arguments, `Hash[K, V]`."""
        start = self.peek().start
        self.parse_class_name()
        if self.accept("["):
            self._type_list("]", allow_empty=False)
        return self.text_since(start)

    def _type_list(self, closer: str, allow_empty: bool = True) -> None:
        if allow_empty and self.accept(closer):
            return
        self.parse_type()
        while self.accept(","):
            if self.peek().kind == closer:
                break
            self.parse_type()
        self.expect(closer, f"`{closer}`")

    def parse_type_list(self) -> List[str]:
        """`[T, U]` as written after a `#` type application."""
        self.expect("[", "`[`")
        types = [self.parse_type()]
        while self.accept(","):
            types.append(self.parse_type())
        self.expect("]", "`]`")
        return types

    def _record(self) -> None:
        if self.accept("}"):
            return
        while True:
            self.accept("?")
            if self.accept("LKEYWORD", "UKEYWORD") is None:
                token = self.peek()
                if token.kind not in LITERAL_TOKENS and token.kind not in NAME_TOKENS:
                    raise self.error("a record key", token)
                self.advance()
                self.expect("=>", "`=>`")
            self.parse_type()
            if self.accept(","):
                if self.accept("}"):
                    return
                continue
            self.expect("}", "`}`")
            return

    def _proc(self) -> None:
        if self.peek().kind == "(":
            self.parse_params()
        self._self_binding()
        self._block()
        self.expect("->", "`->`")
        self._optional()

    # Method types

    def parse_params(self) -> None:
        self.expect("(", "`(`")
        if self.accept(")"):
            return
        if self.peek().kind == "?" and self.peek(1).kind == ")":
            self.advance()
            self.advance()
            return
        keywords_started = False
        while True:
            token = self.peek()
            if token.kind == "?" and self.peek(1).kind in ("LKEYWORD", "UKEYWORD"):
                self.advance()
                self.advance()
                keywords_started = True
            elif token.kind in ("LKEYWORD", "UKEYWORD"):
                self.advance()
                keywords_started = True
            elif token.kind == "**":
                self.advance()
                keywords_started = True
            elif keywords_started:
                raise self.error("a keyword parameter", token)
            elif token.kind in ("?", "*"):
                self.advance()
            self.parse_type()
            self.accept("LIDENT")
            if self.accept(","):
                if self.peek().kind == ")":
                    break
                continue
            break
        self.expect(")", "`)`")

    def _self_binding(self) -> None:
        if self.peek().kind == "[" and self.peek(1).value == "self:":
            self.advance()
            self.advance()
            self.parse_type()
            self.expect("]", "`]`")

    def _block(self) -> None:
        if self.peek().kind == "?" and self.peek(1).kind == "{":
            self.advance()
        if self.accept("{") is None:
            return
        if self.peek().kind == "(":
            self.parse_params()
        self._self_binding()
        self.expect("->", "`->`")
        self._optional()
        self.expect("}", "`}`")

    def parse_block_signature(self) -> str:
        """The signature after `&block:`, optionally marked with a leading `?`."""
        start = self.peek().start
        self.accept("?")
        if self.peek().kind == "(":
            self.parse_params()
        self._self_binding()
        self.expect("->", "`->`")
        self._optional()
        return self.text_since(start)

    def parse_method_type(self) -> str:
        start = self.peek().start
        if self.peek().kind == "[":
            self.parse_type_params(allow_variance=False)
        if self.peek().kind == "(":
            self.parse_params()
        self._self_binding()
        self._block()
        self.expect("->", "`->`")
        self._optional()
        return self.text_since(start)

    def parse_method_types(self) -> List[str]:
        """Overloads separated by `|`, the last of which may be `...`."""
        types = []
        while True:
            self.annotations()
            if self.accept("..."):
                break
            types.append(self.parse_method_type())
            if not self.accept("|"):
                break
        return types

    # Type parameters

    def parse_type_param(self, allow_variance: bool = True) -> TypeParam:
        unchecked = bool(self.accept("unchecked"))
        variance = None
        if allow_variance:
            token = self.accept("in", "out")
            variance = token.value if token else None
        name = self.expect("UIDENT", "a type parameter name").value
        upper_bound = None
        default = None
        if self.accept("<"):
            upper_bound = self.parse_type()
        if self.accept("="):
            default = self.parse_type()
        return TypeParam(name, variance, unchecked, upper_bound, default)

    def parse_type_params(self, allow_variance: bool = True) -> List[TypeParam]:
        self.expect("[", "`[`")
        params = [self.parse_type_param(allow_variance)]
        while self.accept(","):
            if self.peek().kind == "]":
                break
            params.append(self.parse_type_param(allow_variance))
        self.expect("]", "`]`")
        return params

    # Annotation payloads

    def parse_self_types(self) -> List[str]:
        types = [self.parse_class_reference()]
        while self.accept(","):
            types.append(self.parse_class_reference())
        return types

    def parse_use_clauses(self) -> List[str]:
        clauses = [self._use_clause()]
        while self.accept(","):
            clauses.append(self._use_clause())
        return clauses

    def _use_clause(self) -> str:
        start = self.peek().start
        self.accept("::")
        while True:
            token = self.expect(tuple(NAME_TOKENS), "a name")
            if token.kind != "UIDENT" or not self.accept("::"):
                break
            if self.accept("*"):
                return self.text_since(start)
        if self.peek().kind == "LIDENT" and self.peek().value == "as":
            self.advance()
            self.expect(token.kind, "an alias name")
        return self.text_since(start)

    def parse_module_head(self) -> str:
        start = self.peek().start
        self.parse_class_name()
        if self.peek().kind == "[":
            self.parse_type_params()
        if self.accept(":"):
            self.parse_self_types()
        return self.text_since(start)

    def parse_class_head(self) -> str:
        start = self.peek().start
        self.parse_class_name()
        if self.peek().kind == "[":
            self.parse_type_params()
        if self.accept("<"):
            self.parse_class_reference()
        return self.text_since(start)

    # Declarations

    def parse_declarations(self) -> int:
        """Parse `@rbs!` content to the end of input; return the number of items parsed."""
        count = 0
        while True:
            self.annotations()
            if self.at_end():
                return count
            self._member()
            count += 1

    def _declaration(self) -> None:
        token = self.peek()
        kind = token.kind
        if kind == "type":
            self.advance()
            self._alias_name()
            if self.peek().kind == "[":
                self.parse_type_params()
            self.expect("=", "`=`")
            self.parse_type()
        elif kind in ("class", "module"):
            self.advance()
            self.parse_class_name()
            if self.accept("="):
                self.parse_class_name()
                return
            if self.peek().kind == "[":
                self.parse_type_params()
            if kind == "class" and self.accept("<"):
                self.parse_class_reference()
            if kind == "module" and self.accept(":"):
                self.parse_self_types()
            self._members()
        elif kind == "interface":
            self.advance()
            self.parse_class_name()
            if self.peek().kind == "[":
                self.parse_type_params()
            self._members()
        elif kind == "use":
            self.advance()
            self.parse_use_clauses()
        elif kind == "GLOBAL":
            self.advance()
            self.expect(":", "`:`")
            self.parse_type()
        elif kind == "UKEYWORD":
            self.advance()
            self.parse_type()
        elif kind in ("UIDENT", "::"):
            self._qualified_constant()
        else:
            raise self.error("a declaration", token)

    def _alias_name(self) -> None:
        self.accept("::")
        token = self.expect(("UIDENT", "LIDENT"), "a type alias name")
        while token.kind == "UIDENT":
            self.expect("::", "`::`")
            token = self.expect(("UIDENT", "LIDENT"), "a type alias name")

    def _qualified_constant(self) -> None:
        self.accept("::")
        while True:
            token = self.peek()
            if token.kind == "UKEYWORD":
                self.advance()
                self.parse_type()
                return
            self.expect("UIDENT", "a constant name")
            self.expect("::", "`::`")

    def _members(self) -> None:
        while True:
            self.annotations()
            token = self.peek()
            if token.kind == "end":
                self.advance()
                return
            if token.kind == "EOF":
                raise self.error("`end`", token)
            self._member()

    def _member(self) -> None:
        token = self.peek()
        kind = token.kind
        if kind in ("public", "private"):
            self.advance()
        elif kind == "def":
            self._method_member()
        elif kind in ATTRIBUTE_KEYWORDS:
            self._attribute_member()
        elif kind in MIXIN_KEYWORDS:
            self.advance()
            self.parse_class_reference()
        elif kind == "IVAR":
            self.advance()
            self.expect(":", "`:`")
            self.parse_type()
        elif kind == "self" and self.peek(1).kind == "." and self.peek(2).kind == "IVAR":
            self.advance()
            self.advance()
            self.advance()
            self.expect(":", "`:`")
            self.parse_type()
        elif kind == "alias":
            self.advance()
            self._alias_target()
            self._alias_target()
        elif kind in DECLARATION_STARTS or kind in ("UIDENT", "::"):
            self._declaration()
        else:
            raise self.error("a declaration or member", token)

    def _singleton_prefix(self) -> None:
        if self.peek().kind == "self":
            if self.peek(1).kind == ".":
                self.advance()
                self.advance()
            elif self.peek(1).kind == "?" and self.peek(2).kind == ".":
                self.advance()
                self.advance()
                self.advance()

    def _method_member(self) -> None:
        self.expect("def", "`def`")
        self._singleton_prefix()
        token = self.peek()
        if token.kind in ("LKEYWORD", "UKEYWORD"):
            self.advance()
        else:
            self._method_name()
            self.expect(":", "`:`")
        self.parse_method_types()

    def _method_name(self) -> None:
        token = self.peek()
        if token.kind == "[":
            self.advance()
            self.expect("]", "`]`")
            self._attached("=")
            return
        if token.kind in OPERATOR_NAMES:
            self.advance()
            return
        if token.kind in NAME_TOKENS or token.kind in KEYWORDS:
            self.advance()
            for suffix in ("?", "!", "="):
                if self._attached(suffix):
                    break
            return
        raise self.error("a method name", token)

    def _attached(self, kind: str) -> bool:
        token = self.peek()
        if token.kind == kind and token.start == self.last_end:
            self.advance()
            return True
        return False

    def _alias_target(self) -> None:
        self._singleton_prefix()
        self._method_name()

    def _attribute_member(self) -> None:
        self.advance()
        self._singleton_prefix()
        token = self.peek()
        if token.kind == "LKEYWORD":
            self.advance()
        else:
            self.expect("LIDENT", "an attribute name")
            self.expect("(", "`(`")
            self.accept("IVAR")
            self.expect(")", "`)`")
            self.expect(":", "`:`")
        self.parse_type()
