from typing import List

from rbs_inline_lint.annotations import (
    Annotation,
    BlockType,
    MethodType,
    MethodTypeAssertion,
    Override,
    ParamType,
    ParsingResult,
    RBSAnnotation,
    ReturnType,
    Skip,
    parse_comments,
)
from rbs_inline_lint.helpers import blank_line, method_definition_line
from rbs_inline_lint.model import Offense, Rule, SourceUnit

METHOD_ANNOTATIONS = (
    ParamType,
    ReturnType,
    BlockType,
    Override,
    Skip,
    RBSAnnotation,
    MethodType,
    MethodTypeAssertion,
)


def _method_related(result: ParsingResult) -> bool:
    return any(isinstance(annotation, METHOD_ANNOTATIONS) for annotation in result)


def _skip_only(annotations: List[Annotation]) -> bool:
    return bool(annotations) and all(isinstance(annotation, Skip) for annotation in annotations)


class MethodCommentSpacing(Rule):
    """
    Method annotations are placed immediately before the method definition.

    ```
    # bad
    # @rbs x: Integer

    def method(x); end

    # bad
    #: (Integer) -> String
    puts "something"

    # good
    # @rbs x: Integer
    private def method(x); end
    ```

    """

    MESSAGE = "Method-related `@rbs` annotation must be immediately before a method definition."
    BLANK_LINE_MESSAGE = "Remove blank line between method annotation and method definition."

    @staticmethod
    def name() -> str:
        return "method-comment-spacing"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        out: List[Offense] = []
        for result in parse_comments(source.comments()):
            if not result.leading or not _method_related(result):
                continue
            last = result.comments[-1]
            following = result.last_line + 1
            if blank_line(source, following):
                if method_definition_line(source, following + 1):
                    out.append(Offense(source.line_range(following), self.BLANK_LINE_MESSAGE))
                else:
                    out.append(Offense(last.range, self.MESSAGE))
            elif not method_definition_line(source, following) and not _skip_only(
                list(result.annotations)
            ):
                out.append(Offense(last.range, self.MESSAGE))
        return out
