from typing import List, Optional, Sequence

from rbs_inline_lint.annotations import (
    Annotation,
    BlockType,
    MethodType,
    MethodTypeAssertion,
    Override,
    ParamType,
    ReturnType,
    Skip,
    parse_comments,
)
from rbs_inline_lint.helpers import leading_block
from rbs_inline_lint.model import Comment, Declaration, Offense, Range, Rule, SourceUnit

SKIP_MARKERS = (Skip, Override)
DOC_STYLE_ANNOTATIONS = (MethodType, ParamType, BlockType, ReturnType)


def _annotation_range(annotation: Annotation) -> Range:
    return Range(annotation.comments[0].start, annotation.comments[-1].end)


def _trailing_type(comments: Sequence[Comment], line: int) -> Optional[Comment]:
    for comment in comments:
        if comment.line == line and comment.text.startswith("#:"):
            return comment
    return None


class RedundantAnnotationWithSkip(Rule):
    """
    Methods marked `@rbs skip` or `@rbs override` carry no other type annotations.

    RBS::Inline generates no signature for such a method, so the annotations are ignored.

    ```
    # bad
    # @rbs skip
    #: (Integer) -> void
    def method(a)
    end

    # bad
    # @rbs override
    def method(a) #: void
    end

    # good
    # @rbs skip
    def method(a)
    end
    ```

    A second `skip` or `override` marker on the same method is reported too.
    """

    MSG_METHOD_TYPE_SIGNATURE = (
        "Redundant method type signature. `@rbs skip` and `@rbs override` skip RBS generation."
    )
    MSG_DOC_STYLE_ANNOTATION = (
        "Redundant `@rbs` annotation. `@rbs skip` and `@rbs override` skip RBS generation."
    )
    MSG_TRAILING_RETURN = (
        "Redundant trailing return type annotation. "
        "`@rbs skip` and `@rbs override` skip RBS generation."
    )
    MSG_DUPLICATE_SKIP = "Duplicate `@rbs skip` annotation."
    MSG_DUPLICATE_OVERRIDE = "Duplicate `@rbs override` annotation."
    MSG_CONFLICTING_SKIP_OVERRIDE = "`@rbs skip` and `@rbs override` cannot both be specified."

    @staticmethod
    def name() -> str:
        return "redundant-annotation-with-skip"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        comments = source.comments()
        results = parse_comments(comments)
        out: List[Offense] = []
        for declaration in source.declarations():
            block = leading_block(results, declaration.line)
            if block is None or not any(isinstance(a, SKIP_MARKERS) for a in block):
                continue
            out.extend(self._check_block(list(block)))
            out.extend(self._check_trailing(comments, declaration))
        return sorted(out)

    def _check_block(self, annotations: List[Annotation]) -> List[Offense]:
        out: List[Offense] = []
        first: Optional[Annotation] = None
        for annotation in annotations:
            if isinstance(annotation, SKIP_MARKERS):
                if first is None:
                    first = annotation
                else:
                    message = self._marker_message(first, annotation)
                    out.append(Offense(_annotation_range(annotation), message))
            elif isinstance(annotation, MethodTypeAssertion):
                out.append(Offense(_annotation_range(annotation), self.MSG_METHOD_TYPE_SIGNATURE))
            elif isinstance(annotation, DOC_STYLE_ANNOTATIONS):
                out.append(Offense(_annotation_range(annotation), self.MSG_DOC_STYLE_ANNOTATION))
        return out

    def _check_trailing(
        self, comments: Sequence[Comment], declaration: Declaration
    ) -> List[Offense]:
        comment = _trailing_type(comments, declaration.parameters_end_line)
        if comment is None:
            return []
        return [Offense(comment.range, self.MSG_TRAILING_RETURN)]

    def _marker_message(self, first: Annotation, current: Annotation) -> str:
        if type(first) is not type(current):
            return self.MSG_CONFLICTING_SKIP_OVERRIDE
        if isinstance(current, Skip):
            return self.MSG_DUPLICATE_SKIP
        return self.MSG_DUPLICATE_OVERRIDE
