from typing import List

from rbs_inline_lint.annotations import Annotation, parse_comments
from rbs_inline_lint.errors import RBSSyntaxError
from rbs_inline_lint.helpers import byte_range, clamp, comment_at
from rbs_inline_lint.model import Offense, Rule, SourceUnit


class InvalidTypes(Rule):
    """
    Types written in annotation comments must be valid RBS.

    ```
    # bad
    # @rbs arg: Hash[Symbol,
    # @rbs &block: String
    def method(arg, &block); end

    # good
    # @rbs arg: Hash[Symbol, String]
    # @rbs &block: () -> void
    def method(arg, &block); end
    ```

    The offense points at the token the RBS parser rejected, or at the end of
    the annotation when the signature is cut short.
    """

    @staticmethod
    def name() -> str:
        return "invalid-types"

    @staticmethod
    def defaults() -> dict:
        return {}

    def __call__(self, config: dict, source: SourceUnit) -> List[Offense]:
        out: List[Offense] = []
        for result in parse_comments(source.comments()):
            for annotation in result.errors:
                error = annotation.error
                if error is not None:
                    out.append(self._offense(source, annotation, error))
        return sorted(out)

    @staticmethod
    def _offense(source: SourceUnit, annotation: Annotation, error: RBSSyntaxError) -> Offense:
        location = byte_range(source, error.offset, error.offset + error.length)
        comment = comment_at(annotation.comments, location.start)
        return Offense(
            clamp(location, comment.range), f"Invalid annotation found: {error.message}"
        )
