import re
from typing import List, Sequence

from rbs_inline_lint.helpers import blank_line
from rbs_inline_lint.keywords import EMBEDDED_RBS_RE
from rbs_inline_lint.model import Comment, Offense, Rule, SourceUnit


class EmbeddedRbsSpacing(Rule):
    """
    An `@rbs!` comment must be followed by a blank line.

    ```
    # bad
    # @rbs! type foo = Integer
    def method; end

    # good
    # @rbs! type foo = Integer

    def method; end
    ```

    """

    MESSAGE = "`@rbs!` comment must be followed by a blank line."

    @staticmethod
    def name() -> str:
        return "embedded-rbs-spacing"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        comments = source.comments()
        out: List[Offense] = []
        for index, comment in enumerate(comments):
            matched = EMBEDDED_RBS_RE.match(comment.text)
            if not matched:
                continue
            last = self._last_embedded_comment(comments, index, len(matched.group("indent")))
            following = last.line + 1
            if blank_line(source, following):
                continue
            offense = Offense(source.line_range(following), self.MESSAGE)
            if offense not in out:
                out.append(offense)
        return out

    @staticmethod
    def _last_embedded_comment(comments: Sequence[Comment], index: int, indent: int) -> Comment:
        continuation = re.compile(r"\A#(\s{%d,}.*|\s*)\Z" % (indent + 1))
        last = comments[index]
        for comment in comments[index + 1 :]:
            if comment.line != last.line + 1 or comment.inline:
                break
            if not continuation.match(comment.text):
                break
            last = comment
        return last
