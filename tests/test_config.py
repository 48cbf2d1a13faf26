import os

import pytest
import yaml

from rbs_inline_lint.config import STUB, load, load_config
from rbs_inline_lint.errors import ConfigError
from rbs_inline_lint.rules import RULES


class TestLoad:
    def test_resolves_files_relative_to_config(self):
        config = load("files: [lib/a.rb]\nrules:\n  - rule: invalid-comment\n", "/base")

        assert config["files"] == [os.path.abspath("/base/lib/a.rb")]
        assert config["rules"] == [{"rule": "invalid-comment"}]

    def test_files_are_optional(self):
        config = load("rules:\n  - rule: invalid-types\n", "/base")

        assert config["files"] == []

    def test_rule_options(self):
        text = (
            "rules:\n"
            "  - rule: invalid-types\n"
            "    severity: error\n"
            "  - rule: unmatched-annotations\n"
            "    enabled: false\n"
        )

        config = load(text, "/base")

        assert config["rules"][0]["severity"] == "error"
        assert config["rules"][1]["enabled"] is False

    @pytest.mark.parametrize(
        "text, message",
        [
            ("- a\n- b\n", "expected to read a dictionary"),
            ("files: a.rb\nrules: [{rule: invalid-types}]\n", "'files' key: expected a list"),
            ("files: [1]\nrules: [{rule: invalid-types}]\n", "'files', index 0: expected a str"),
            ("files: [a.rb]\n", "'rules' key: a list of rules is required"),
            ("rules: [{severity: error}]\n", "'rules' index 0: unnamed rule"),
            ("rules: [{rule: nope}]\n", "'rules' index 0: unknown rule 'nope'"),
            ("rules: [{rule: invalid-types, limit: 1}]\n", "unknown config params"),
            ("rules: [{rule: invalid-types, severity: fatal}]\n", "unknown severity 'fatal'"),
            ("rules: [{rule: invalid-types, enabled: maybe}]\n", "'enabled' must be a bool"),
            ("rules: [\n", "config file invalid"),
        ],
    )
    def test_invalid(self, text, message):
        with pytest.raises(ConfigError) as excinfo:
            load(text, "/base")

        assert str(excinfo.value).startswith("config file invalid: ")
        assert message in str(excinfo.value)

    def test_load_config(self, tmp_path):
        path = tmp_path / "rbs-inline-lint.yml"
        path.write_text("files: [lib]\nrules:\n  - rule: keyword-separator\n")

        config = load_config(str(path))

        assert config["files"] == [str(tmp_path / "lib")]


class TestStub:
    def test_stub_is_a_valid_config(self):
        config = load(STUB, "/base")

        assert [rule["rule"] for rule in config["rules"]] == list(RULES)

    def test_stub_is_yaml(self):
        assert isinstance(yaml.safe_load(STUB), dict)
