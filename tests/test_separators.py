"""Tests for the keyword-separator and parameters-separator rules."""
import pytest

from rbs_inline_lint.model import Range
from rbs_inline_lint.rules.keyword_separator import KeywordSeparator
from rbs_inline_lint.rules.parameters_separator import ParametersSeparator
from rbs_inline_lint.source import load


def keyword_offenses(text):
    return KeywordSeparator()(KeywordSeparator.defaults(), load(text))


def parameter_offenses(text):
    return ParametersSeparator()(ParametersSeparator.defaults(), load(text))


class TestKeywordSeparator:
    def test_colon_and_following_space(self):
        offenses = keyword_offenses("# @rbs module-self: String\nmodule Foo; end\n")

        assert len(offenses) == 1
        assert offenses[0].range == Range(18, 20)
        assert offenses[0].message == "Do not use `:` after the keyword."

    def test_colon_alone(self):
        offenses = keyword_offenses("# @rbs generic:T\nclass Foo; end\n")

        assert offenses[0].range == Range(14, 15)

    @pytest.mark.parametrize(
        "keyword", ["inherits", "override", "use", "generic", "skip", "module", "class"]
    )
    def test_every_keyword(self, keyword):
        assert len(keyword_offenses(f"# @rbs {keyword}: Foo\n")) == 1

    @pytest.mark.parametrize(
        "comment",
        [
            "# @rbs module-self String",
            "# @rbs generic T",
            "# @rbs param: String",
            "# @rbs return: String",
            "# module-self: String",
        ],
    )
    def test_accepts(self, comment):
        assert keyword_offenses(comment + "\n") == []

    def test_keyword_named_parameter(self):
        text = "# @rbs skip: bool\ndef method(skip:); end\n"

        assert keyword_offenses(text) == []

    def test_keyword_named_parameter_on_other_method(self):
        text = "# @rbs skip: bool\ndef method(other); end\n"

        assert len(keyword_offenses(text)) == 1

    def test_untyped_keyword_named_parameter(self):
        text = "# @rbs class:\ndef method(class:); end\n"

        assert keyword_offenses(text) == []

    def test_untyped_skip_is_not_a_parameter(self):
        text = "# @rbs skip:\ndef method(skip:); end\n"

        assert len(keyword_offenses(text)) == 1


class TestParametersSeparator:
    def test_missing_colon(self):
        offenses = parameter_offenses("# @rbs param String\ndef method(param); end\n")

        assert len(offenses) == 1
        assert offenses[0].range == Range(12, 12)
        assert offenses[0].message == "Use `:` as a separator between parameter name and type."

    def test_leading_colon(self):
        offenses = parameter_offenses("# @rbs :param String\ndef method(param); end\n")

        assert offenses[0].range == Range(13, 13)

    @pytest.mark.parametrize(
        "comment",
        [
            "# @rbs param: String",
            "# @rbs %a{pure}",
            "# @rbs %a(pure)",
            "# @rbs %a[implicitly-returns-nil]",
            "# @rbs override",
            "# @rbs module-self String",
            "# @rbs (Integer) -> void",
            "# @rbs [T] (T) -> T",
            "# @rbs -> void",
            "# @rbs *args: String",
            "# @rbs &block: () -> void",
            "# @rbs @ivar: Integer",
            "# @rbs! type foo = Integer",
            "#: () -> void",
            "# plain comment",
        ],
    )
    def test_accepts(self, comment):
        assert parameter_offenses(comment + "\ndef method(param, *args, &block); end\n") == []

    def test_offense_after_multibyte_text(self):
        text = "x = 'ä'\n# @rbs param String\n"

        offenses = parameter_offenses(text)

        insertion = text.index("param") + len("param")
        assert offenses[0].range == Range(insertion, insertion)
