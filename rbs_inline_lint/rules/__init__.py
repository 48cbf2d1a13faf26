"""Lint rules."""
from typing import Dict, Type

from rbs_inline_lint.model import Rule
from rbs_inline_lint.rules.embedded_rbs_spacing import EmbeddedRbsSpacing
from rbs_inline_lint.rules.invalid_comment import InvalidComment
from rbs_inline_lint.rules.invalid_types import InvalidTypes
from rbs_inline_lint.rules.keyword_separator import KeywordSeparator
from rbs_inline_lint.rules.method_comment_spacing import MethodCommentSpacing
from rbs_inline_lint.rules.parameters_separator import ParametersSeparator
from rbs_inline_lint.rules.redundant_annotation_with_skip import RedundantAnnotationWithSkip
from rbs_inline_lint.rules.unmatched_annotations import UnmatchedAnnotations
from rbs_inline_lint.rules.variable_comment_spacing import VariableCommentSpacing

RULES: Dict[str, Type[Rule]] = {
    "invalid-comment": InvalidComment,
    "invalid-types": InvalidTypes,
    "keyword-separator": KeywordSeparator,
    "parameters-separator": ParametersSeparator,
    "unmatched-annotations": UnmatchedAnnotations,
    "embedded-rbs-spacing": EmbeddedRbsSpacing,
    "method-comment-spacing": MethodCommentSpacing,
    "variable-comment-spacing": VariableCommentSpacing,
    "redundant-annotation-with-skip": RedundantAnnotationWithSkip,
}
# Thoughts on Writing Rules
# - A rule gets one SourceUnit and returns offenses as character ranges
#   relative to the file, in source order.
# - Rules are independent: never rely on another rule having run.
# - Malformed annotations are offenses, not exceptions. Do not let
#   RBSSyntaxError out of a rule.
# - Byte offsets from the RBS parser must go through
#   SourceUnit.character_offset before they are used in a Range.
