"""Type annotations for rbs-inline-lint."""
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Set, Tuple

from typing_extensions import Protocol


class Range(NamedTuple):
    """Half-open character range relative to the containing file."""

    start: int
    end: int


@dataclass(frozen=True)
class Comment:
    """A single `#` comment as found by the source scanner."""

    text: str
    start: int
    end: int
    byte_start: int
    byte_end: int
    line: int
    column: int
    inline: bool = False

    @property
    def range(self) -> Range:
        return Range(self.start, self.end)

    @property
    def body(self) -> str:
        """Text after the leading `#`."""
        return self.text[1:]


class ParameterKind(Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    REST = "rest"
    KEYWORD = "keyword"
    OPTIONAL_KEYWORD = "optional_keyword"
    KEYWORD_REST = "keyword_rest"
    BLOCK = "block"
    FORWARD = "forward"


class Parameter(NamedTuple):
    name: Optional[str]
    kind: ParameterKind

    def matchable_names(self) -> List[str]:
        """Names an annotation may use to refer to this parameter."""
        if self.kind == ParameterKind.REST:
            return [f"*{self.name}", "*"] if self.name else ["*"]
        if self.kind == ParameterKind.KEYWORD_REST:
            return [f"**{self.name}", "**"] if self.name else ["**"]
        if self.kind == ParameterKind.BLOCK:
            return ["&", f"&{self.name}"] if self.name else ["&", "&block"]
        if self.kind == ParameterKind.FORWARD:
            return ["*", "**", "&"]
        return [self.name] if self.name else []


@dataclass(frozen=True)
class Declaration:
    """A method definition found by the source scanner."""

    name: str
    line: int
    # Line of the closing parenthesis, or the `def` line when there is none.
    parameters_end_line: int
    parameters: Tuple[Parameter, ...] = ()

    def parameter_names(self) -> Set[str]:
        names: Set[str] = set()
        for parameter in self.parameters:
            names.update(parameter.matchable_names())
        return names


@dataclass(frozen=True, order=True)
class Offense:
    range: Range
    message: str


class SourceUnit(Protocol):
    """One file as seen by the rules: its comments and method declarations."""

    @property
    def path(self) -> str:
        pass

    @property
    def text(self) -> str:
        pass

    def comments(self) -> Sequence[Comment]:
        """All comments in file order."""
        pass

    def declarations(self) -> Sequence[Declaration]:
        """All method declarations in file order."""
        pass

    def line(self, number: int) -> Optional[str]:
        """Text of the 1-based line number without its newline, None past EOF."""
        pass

    def line_range(self, number: int) -> Range:
        pass

    def character_offset(self, byte_offset: int) -> int:
        """Translate a file byte offset into a character offset."""
        pass

    def location(self, offset: int) -> Tuple[int, int]:
        """1-based line and 1-based column of a character offset."""
        pass


class Rule(Protocol):
    @staticmethod
    def name() -> str:
        """Rule name, something like this-is-my-rule. Must match key in RULES."""
        pass

    @staticmethod
    def defaults() -> dict:
        """A dict of options for this rule, with their defaults. Options
        are guaranteed to exist when passed to __call__."""
        pass

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        """Rule definition."""
        pass
