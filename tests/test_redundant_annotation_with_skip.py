"""Tests for the redundant-annotation-with-skip rule."""
import pytest

from rbs_inline_lint.model import Range
from rbs_inline_lint.rules.redundant_annotation_with_skip import RedundantAnnotationWithSkip
from rbs_inline_lint.source import load

SIGNATURE = RedundantAnnotationWithSkip.MSG_METHOD_TYPE_SIGNATURE
DOC_STYLE = RedundantAnnotationWithSkip.MSG_DOC_STYLE_ANNOTATION
TRAILING = RedundantAnnotationWithSkip.MSG_TRAILING_RETURN


def offenses_of(text):
    offenses = RedundantAnnotationWithSkip()(RedundantAnnotationWithSkip.defaults(), load(text))
    return [(offense.range, offense.message) for offense in offenses]


class TestRedundantAnnotations:
    def test_method_type_signature(self):
        text = "# @rbs skip\n#: (Integer) -> void\ndef method(a)\nend\n"

        assert offenses_of(text) == [(Range(12, 32), SIGNATURE)]
        assert SIGNATURE == (
            "Redundant method type signature. `@rbs skip` and `@rbs override` skip RBS generation."
        )

    def test_doc_style_method_type(self):
        text = "# @rbs skip\n# @rbs (Integer) -> void\ndef method(a)\nend\n"

        assert offenses_of(text) == [(Range(12, 36), DOC_STYLE)]

    def test_each_parameter_annotation(self):
        text = "# @rbs skip\n# @rbs a: Integer\n# @rbs b: String\ndef method(a, b)\nend\n"

        assert offenses_of(text) == [(Range(12, 29), DOC_STYLE), (Range(30, 46), DOC_STYLE)]

    def test_return_annotation(self):
        text = "# @rbs skip\n# @rbs return: String\ndef method(a)\nend\n"

        assert offenses_of(text) == [(Range(12, 33), DOC_STYLE)]

    def test_block_annotation(self):
        text = "# @rbs skip\n# @rbs &block: () -> void\ndef method(&block)\nend\n"

        assert offenses_of(text) == [(Range(12, 37), DOC_STYLE)]

    def test_signature_and_parameter_annotation(self):
        text = "# @rbs skip\n# @rbs a: Integer\n#: (Integer) -> void\ndef method(a)\nend\n"

        assert offenses_of(text) == [(Range(12, 29), DOC_STYLE), (Range(30, 50), SIGNATURE)]

    def test_trailing_return_type(self):
        text = "# @rbs skip\ndef method(a) #: void\nend\n"

        assert offenses_of(text) == [(Range(26, 33), TRAILING)]

    def test_trailing_return_type_after_multi_line_parameters(self):
        text = "# @rbs skip\ndef method(a,\n           b) #: void\nend\n"

        assert offenses_of(text) == [(Range(40, 47), TRAILING)]

    def test_singleton_method(self):
        text = "# @rbs skip\n#: (Integer) -> void\ndef self.method(a)\nend\n"

        assert offenses_of(text) == [(Range(12, 32), SIGNATURE)]

    def test_override(self):
        text = "# @rbs override\n# @rbs a: Integer\ndef method(a) #: void\nend\n"

        assert offenses_of(text) == [(Range(16, 33), DOC_STYLE), (Range(48, 55), TRAILING)]

    def test_instance_variable_annotation_is_ignored(self):
        text = "# @rbs skip\n# @rbs @name: String\ndef method(a)\nend\n"

        assert offenses_of(text) == []


class TestMarkers:
    @pytest.mark.parametrize(
        "text, expected",
        [
            (
                "# @rbs skip\n# @rbs skip\ndef method(a)\nend\n",
                (Range(12, 23), "Duplicate `@rbs skip` annotation."),
            ),
            (
                "# @rbs override\n# @rbs override\ndef method(a)\nend\n",
                (Range(16, 31), "Duplicate `@rbs override` annotation."),
            ),
            (
                "# @rbs skip\n# @rbs override\ndef method(a)\nend\n",
                (Range(12, 27), "`@rbs skip` and `@rbs override` cannot both be specified."),
            ),
            (
                "# @rbs override\n# @rbs skip\ndef method(a)\nend\n",
                (Range(16, 27), "`@rbs skip` and `@rbs override` cannot both be specified."),
            ),
        ],
    )
    def test_second_marker(self, text, expected):
        assert offenses_of(text) == [expected]


class TestNoOffenses:
    @pytest.mark.parametrize(
        "text",
        [
            "# @rbs skip\ndef method(a)\nend\n",
            "# @rbs override\ndef method(a)\nend\n",
            "#: (Integer) -> void\ndef method(a)\nend\n",
            "# @rbs a: Integer\ndef method(a)\nend\n",
            "def method(a) #: void\nend\n",
            "def method(a)\nend\n",
            # Blank line: the markers do not belong to the method.
            "# @rbs skip\n\n#: (Integer) -> void\ndef method(a)\nend\n",
        ],
    )
    def test_clean(self, text):
        assert offenses_of(text) == []
