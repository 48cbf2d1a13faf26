from typing import List, Tuple

from rbs_inline_lint.annotations import (
    BlockType,
    NamedAnnotation,
    ParamType,
    ParsingResult,
    ReturnType,
    parse_comments,
)
from rbs_inline_lint.helpers import byte_range, leading_block
from rbs_inline_lint.model import Declaration, Offense, Rule, SourceUnit


class AnnotationCrossReference(object):
    """
    Match parameter annotations against the methods they are attached to.

    Call `record` once for every declaration in the file, then `finish` once
    to collect the offenses. `finish` drains the accumulated state, so an
    instance never carries annotations over into another file.
    """

    def __init__(self, source: SourceUnit) -> None:
        self._source = source
        self._unclaimed: List[ParsingResult] = parse_comments(source.comments())
        self._claimed: List[Tuple[Declaration, NamedAnnotation]] = []

    def record(self, declaration: Declaration) -> None:
        """Claim the annotation block directly above a declaration."""
        block = leading_block(self._unclaimed, declaration.line)
        if block is None:
            return
        self._unclaimed = [result for result in self._unclaimed if result is not block]
        for annotation in block:
            # Instance variable and return annotations have no parameter to match.
            if isinstance(annotation, (ParamType, BlockType)):
                self._claimed.append((declaration, annotation))

    def finish(self) -> List[Offense]:
        out: List[Offense] = []
        for declaration, annotation in self._claimed:
            if annotation.name not in declaration.parameter_names():
                out.append(self._offense(annotation))
        for result in self._unclaimed:
            for annotation in result:
                if isinstance(annotation, (ParamType, BlockType, ReturnType)):
                    out.append(self._offense(annotation))

        self._unclaimed = []
        self._claimed = []
        return sorted(out)

    def _offense(self, annotation: NamedAnnotation) -> Offense:
        start = annotation.name_offset
        end = start + len(annotation.name.encode("utf-8"))
        return Offense(
            byte_range(self._source, start, end),
            f"target parameter not found: `{annotation.name}`.",
        )


class UnmatchedAnnotations(Rule):
    """
    Parameter annotations must name a parameter of the annotated method.

    ```
    # bad
    # @rbs unknown: String
    def method(arg); end

    # good
    # @rbs arg: String
    def method(arg); end
    ```

    Parameter, block and return annotations that are not attached to any
    method are reported as well.
    """

    @staticmethod
    def name() -> str:
        return "unmatched-annotations"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        reference = AnnotationCrossReference(source)
        for declaration in source.declarations():
            reference.record(declaration)
        return reference.finish()
