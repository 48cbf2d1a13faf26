from rbs_inline_lint.config import load
from rbs_inline_lint.linter import Violation, collect_files, lint_file, lint_source, rule_configs
from rbs_inline_lint.rules import RULES
from rbs_inline_lint.source import load as load_source

SOURCE = (
    "class Foo\n"
    "  # () -> void\n"
    "  # @rbs unknown: String\n"
    "  def method(arg); end\n"
    "end\n"
)


class TestRuleConfigs:
    def test_defaults_enable_every_rule(self):
        configs = rule_configs()

        assert set(configs) == set(RULES)
        assert all(options["severity"] == "convention" for options in configs.values())

    def test_config_selects_rules(self):
        config = load(
            "rules:\n"
            "  - rule: invalid-comment\n"
            "    severity: warning\n"
            "  - rule: invalid-types\n"
            "    enabled: false\n",
            "/base",
        )

        configs = rule_configs(config)

        assert configs == {"invalid-comment": {"severity": "warning"}}


class TestLintSource:
    def test_violations_in_source_order(self):
        violations = lint_source(load_source(SOURCE, "foo.rb"), rule_configs())

        assert [(v.line, v.column, v.rule) for v in violations] == [
            (2, 3, "invalid-comment"),
            (3, 10, "unmatched-annotations"),
        ]

    def test_format(self):
        violation = Violation(
            path="foo.rb",
            line=3,
            column=10,
            rule="unmatched-annotations",
            severity="warning",
            message="target parameter not found: `unknown`.",
        )

        assert violation.format() == (
            "foo.rb:3:10: W: [unmatched-annotations] target parameter not found: `unknown`."
        )

    def test_clean_source(self):
        text = "# @rbs arg: String\n# @rbs return: void\ndef method(arg); end\n"

        assert lint_source(load_source(text), rule_configs()) == []

    def test_lint_file(self, tmp_path):
        path = tmp_path / "foo.rb"
        path.write_text(SOURCE)

        violations = lint_file(str(path), rule_configs())

        assert {v.path for v in violations} == {str(path)}
        assert len(violations) == 2


class TestCollectFiles:
    def test_directories_globs_and_files(self, tmp_path):
        (tmp_path / "lib" / "sub").mkdir(parents=True)
        (tmp_path / "lib" / ".hidden").mkdir()
        (tmp_path / "lib" / "a.rb").write_text("")
        (tmp_path / "lib" / "sub" / "b.rb").write_text("")
        (tmp_path / "lib" / ".hidden" / "c.rb").write_text("")
        (tmp_path / "lib" / "notes.txt").write_text("")
        (tmp_path / "Rakefile").write_text("")

        files = collect_files(
            [
                str(tmp_path / "lib"),
                str(tmp_path / "lib" / "**" / "*"),
                str(tmp_path / "Rakefile"),
            ]
        )

        assert files == [
            str(tmp_path / "lib" / "a.rb"),
            str(tmp_path / "lib" / "sub" / "b.rb"),
            str(tmp_path / "Rakefile"),
        ]

    def test_glob_without_matches(self, tmp_path):
        assert collect_files([str(tmp_path / "*.rb")]) == []
