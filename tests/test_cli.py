from click.testing import CliRunner

from rbs_inline_lint.__main__ import main
from rbs_inline_lint.config import STUB
from rbs_inline_lint.rules import RULES


def write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


class TestLint:
    def test_reports_violations(self, tmp_path):
        bad = write(tmp_path / "bad.rb", "# () -> void\ndef method; end\n")

        result = CliRunner().invoke(main, ["lint", str(bad)])

        assert result.exit_code == 1
        expected = f"{bad}:1:1: C: [invalid-comment] Invalid RBS annotation comment found."
        assert expected in result.output
        assert "1 error found in 1 file" in result.output

    def test_clean_file(self, tmp_path):
        good = write(tmp_path / "good.rb", "#: () -> void\ndef method; end\n")

        result = CliRunner().invoke(main, ["lint", str(good)])

        assert result.exit_code == 0
        assert "0 errors found in 1 file" in result.output

    def test_config_file(self, tmp_path):
        (tmp_path / "lib").mkdir()
        write(tmp_path / "lib" / "a.rb", "# @rbs module-self: String\nmodule A; end\n")
        config = write(
            tmp_path / "rbs-inline-lint.yml",
            "files: [lib]\nrules:\n  - rule: keyword-separator\n    severity: error\n",
        )

        result = CliRunner().invoke(main, ["-c", str(config), "lint"])

        assert result.exit_code == 1
        assert f"Load config file: {config}" in result.output
        assert ":1:19: E: [keyword-separator] Do not use `:` after the keyword." in result.output

    def test_disabled_rule(self, tmp_path):
        bad = write(tmp_path / "bad.rb", "# () -> void\ndef method; end\n")
        config = write(
            tmp_path / "rbs-inline-lint.yml",
            "rules:\n  - rule: invalid-comment\n    enabled: false\n  - rule: invalid-types\n",
        )

        result = CliRunner().invoke(main, ["-c", str(config), "lint", str(bad)])

        assert result.exit_code == 0

    def test_invalid_config(self, tmp_path):
        config = write(tmp_path / "rbs-inline-lint.yml", "rules: [{rule: nope}]\n")

        result = CliRunner().invoke(main, ["-c", str(config), "lint"])

        assert result.exit_code == 1
        assert "config file invalid: 'rules' index 0: unknown rule 'nope'" in result.output

    def test_no_files(self):
        result = CliRunner().invoke(main, ["lint"])

        assert result.exit_code == 1
        assert "no files to lint" in result.output

    def test_unreadable_file_does_not_stop_the_run(self, tmp_path):
        broken = tmp_path / "broken.rb"
        broken.write_bytes(b"# \xff\n")
        bad = write(tmp_path / "bad.rb", "# () -> void\n")

        result = CliRunner().invoke(main, ["lint", str(broken), str(bad)])

        assert result.exit_code == 1
        assert f"unable to lint {broken}: not valid UTF-8" in result.output
        assert "[invalid-comment]" in result.output


class TestCommands:
    def test_stub(self):
        result = CliRunner().invoke(main, ["stub"])

        assert result.exit_code == 0
        assert result.output == STUB + "\n"

    def test_rules(self):
        result = CliRunner().invoke(main, ["rules"])

        assert result.exit_code == 0
        for rulename in RULES:
            assert f"{rulename}: " in result.output
        summary = "invalid-comment: Annotation comments must start with `#:` or `# @rbs`."
        assert summary in result.output
