from typing import List, Set

from rbs_inline_lint.annotations import parse_comments
from rbs_inline_lint.helpers import leading_block
from rbs_inline_lint.keywords import NO_ARGUMENT_KEYWORDS, keyword_with_colon
from rbs_inline_lint.model import Offense, Range, Rule, SourceUnit


class KeywordSeparator(Rule):
    """
    Keyword annotations are not separated from their argument with `:`.

    ```
    # bad
    # @rbs module-self: String

    # good
    # @rbs module-self String
    ```

    A keyword that is also the name of a parameter of the method below it
    (`# @rbs skip: bool` above `def m(skip:)`) is a parameter annotation and
    is left alone. `override` and `skip` only count as parameter names when a
    type follows the colon.
    """

    MESSAGE = "Do not use `:` after the keyword."

    @staticmethod
    def name() -> str:
        return "keyword-separator"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        parameter_annotations = self._parameter_annotations(source)
        out: List[Offense] = []
        for comment in source.comments():
            matched = keyword_with_colon(comment.text)
            if not matched or comment.start in parameter_annotations:
                continue
            colon = matched.end() - 1
            end = colon + 1
            if comment.text[end : end + 1] == " ":
                end += 1
            out.append(Offense(Range(comment.start + colon, comment.start + end), self.MESSAGE))
        return out

    @staticmethod
    def _parameter_annotations(source: SourceUnit) -> Set[int]:
        """Start offsets of `# @rbs <keyword>: T` comments that name a real parameter."""
        results = parse_comments(source.comments())
        found: Set[int] = set()
        for declaration in source.declarations():
            block = leading_block(results, declaration.line)
            if block is None:
                continue
            names = declaration.parameter_names()
            for comment in block.comments:
                matched = keyword_with_colon(comment.text)
                if not matched or matched.group("keyword") not in names:
                    continue
                typed = bool(comment.text[matched.end() :].strip())
                if typed or matched.group("keyword") not in NO_ARGUMENT_KEYWORDS:
                    found.add(comment.start)
        return found
