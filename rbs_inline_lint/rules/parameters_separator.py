import re
from typing import List

from rbs_inline_lint.keywords import METHOD_TYPE_OPENERS, RBS_PREFIX_RE, is_rbs_annotation_keyword
from rbs_inline_lint.model import Offense, Range, Rule, SourceUnit

NAME_WITH_COLON_RE = re.compile(r"\A[^\s:]+:(?!:)")


class ParametersSeparator(Rule):
    """
    Parameter annotations separate the name from the type with `:`.

    ```
    # bad
    # @rbs param String
    # @rbs :param String

    # good
    # @rbs param: String
    # @rbs %a{pure}
    # @rbs (String) -> void
    ```

    """

    MESSAGE = "Use `:` as a separator between parameter name and type."

    @staticmethod
    def name() -> str:
        return "parameters-separator"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        out: List[Offense] = []
        for comment in source.comments():
            matched = RBS_PREFIX_RE.match(comment.text)
            if not matched or self._allowed(matched.group("keyword")):
                continue
            insertion = comment.start + matched.end("keyword")
            out.append(Offense(Range(insertion, insertion), self.MESSAGE))
        return out

    @staticmethod
    def _allowed(token: str) -> bool:
        if is_rbs_annotation_keyword(token):
            return True
        if token.startswith(METHOD_TYPE_OPENERS):
            return True
        return NAME_WITH_COLON_RE.match(token) is not None
