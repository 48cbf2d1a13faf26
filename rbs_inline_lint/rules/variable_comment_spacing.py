from typing import List, Sequence

from rbs_inline_lint.helpers import blank_line
from rbs_inline_lint.keywords import VARIABLE_COMMENT_RE
from rbs_inline_lint.model import Comment, Offense, Rule, SourceUnit


class VariableCommentSpacing(Rule):
    """
    Variable `@rbs` comments are followed by a blank line.

    This covers instance variables, class variables and class instance variables.

    ```
    # bad
    # @rbs @ivar: Integer
    # @rbs @@cvar: Float
    # @rbs self.@civar: String
    def method
    end

    # good
    # @rbs @ivar: Integer
    # @rbs @@cvar: Float
    # @rbs self.@civar: String

    def method
    end
    ```

    """

    MESSAGE = "`@rbs` variable comment must be followed by a blank line."

    @staticmethod
    def name() -> str:
        return "variable-comment-spacing"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        comments = source.comments()
        out: List[Offense] = []
        for index, comment in enumerate(comments):
            if not VARIABLE_COMMENT_RE.match(comment.text):
                continue
            following = self._last_variable_comment(comments, index).line + 1
            if blank_line(source, following):
                continue
            offense = Offense(source.line_range(following), self.MESSAGE)
            if offense not in out:
                out.append(offense)
        return out

    @staticmethod
    def _last_variable_comment(comments: Sequence[Comment], index: int) -> Comment:
        last = comments[index]
        for comment in comments[index + 1 :]:
            if comment.line != last.line + 1 or not VARIABLE_COMMENT_RE.match(comment.text):
                break
            last = comment
        return last
