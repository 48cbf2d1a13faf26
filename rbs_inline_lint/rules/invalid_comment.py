from typing import List

from rbs_inline_lint.keywords import INVALID_COMMENT_PATTERNS
from rbs_inline_lint.model import Offense, Rule, SourceUnit


class InvalidComment(Rule):
    """
    Annotation comments must start with `#:` or `# @rbs`.

    ```
    # bad
    # () -> void
    # : () -> void
    #: @rbs param: String
    # rbs param: String

    # good
    #: () -> void
    # @rbs param: String
    ```

    """

    MESSAGE = "Invalid RBS annotation comment found."

    @staticmethod
    def name() -> str:
        return "invalid-comment"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        out: List[Offense] = []
        for comment in source.comments():
            if any(pattern.match(comment.text) for pattern in INVALID_COMMENT_PATTERNS):
                out.append(Offense(comment.range, self.MESSAGE))
        return out
