import os
from typing import Any, List, cast

import yaml
from typing_extensions import TypedDict

from rbs_inline_lint.errors import ConfigError
from rbs_inline_lint.rules import RULES


class Rule(TypedDict, total=False):
    rule: str
    severity: str
    enabled: bool


class Config(TypedDict):
    files: List[str]
    rules: List[Rule]


SEVERITIES = ("info", "convention", "warning", "error")
DEFAULT_SEVERITY = "convention"
# Options every rule accepts on top of its own defaults.
COMMON_RULE_PARAMS = {"severity", "enabled"}


def load(stream: Any, path: str) -> Config:
    """
    Read and validate a configuration.

    :param stream: YAML text or an open file.
    :param path: Directory that relative 'files' entries are resolved against.
    :return: The validated configuration.
    """

    def _validate(rawconf: dict) -> Config:
        if not isinstance(rawconf, dict):
            raise ConfigError(f"expected to read a dictionary, but read a {type(rawconf)}")
        files = rawconf.get("files") or []
        if not isinstance(files, list):
            raise ConfigError(f"'files' key: expected a list, got a {type(files)}")
        for i, file in enumerate(files):
            if not isinstance(file, str):
                raise ConfigError(f"'files', index {i}: expected a str, got a {type(file)}")
            files[i] = os.path.abspath(os.path.join(path, file))
        rawconf["files"] = files

        if "rules" not in rawconf or not rawconf["rules"]:
            raise ConfigError("'rules' key: a list of rules is required")
        if not isinstance(rawconf["rules"], list):
            raise ConfigError(f"'rules' key: expected a list, got a {type(rawconf['rules'])}")
        for i, rule in enumerate(rawconf["rules"]):
            if not isinstance(rule, dict) or "rule" not in rule:
                raise ConfigError(f"'rules' index {i}: unnamed rule (missing 'rule' key)")
            if rule["rule"] not in RULES:
                raise ConfigError(f"'rules' index {i}: unknown rule '{rule['rule']}'")

            config_file_params = set(rule.keys())
            config_file_params.remove("rule")

            rulecls = RULES[rule["rule"]]
            default_rule_params = set(rulecls.defaults().keys()) | COMMON_RULE_PARAMS
            # if default_rule_params is not a super or the same set of config_file_params
            if not (default_rule_params >= config_file_params):
                raise ConfigError(
                    f"'rules' index {i}: rule '{rule['rule']}': unknown config params: "
                    f"{config_file_params - default_rule_params}"
                )
            if rule.get("severity", DEFAULT_SEVERITY) not in SEVERITIES:
                raise ConfigError(
                    f"'rules' index {i}: rule '{rule['rule']}': unknown severity "
                    f"'{rule['severity']}', expected one of {', '.join(SEVERITIES)}"
                )
            if not isinstance(rule.get("enabled", True), bool):
                raise ConfigError(
                    f"'rules' index {i}: rule '{rule['rule']}': 'enabled' must be a bool"
                )

        return cast(Config, rawconf)

    try:
        rawconf = yaml.safe_load(stream)
        return _validate(rawconf)
    except yaml.YAMLError as e:
        raise ConfigError(f"config file invalid: {str(e)}")
    except ConfigError as e:
        raise ConfigError(f"config file invalid: {str(e)}")


def load_config(fh: str) -> Config:
    with open(fh, "r", encoding="utf-8") as handle:
        return load(handle, os.path.dirname(os.path.abspath(fh)))


STUB = """
# These paths are relative to the directory containing this configuration file.
# Directories are searched for Ruby files, glob patterns are expanded. Paths
# given on the command line take precedence over this list.
files:
    - ./lib
    - ./app/**/*.rb

rules:
    # this is a list of all rules available, their parameters, and their
    # default values. Comment out a rule (or set enabled: false) to disable it.
    # Every rule accepts a severity of info, convention, warning or error.

    # Annotation comments must start with `#:` or `# @rbs`
    - rule: "invalid-comment"
      severity: convention

    # Types in annotation comments must be valid RBS
    - rule: "invalid-types"
      severity: convention

    # Do not use `:` after keywords such as module-self, generic or inherits
    - rule: "keyword-separator"
      severity: convention

    # Use `:` between a parameter name and its type
    - rule: "parameters-separator"
      severity: convention

    # Parameter annotations must name a parameter of the method below them
    - rule: "unmatched-annotations"
      severity: convention

    # `@rbs!` comments must be followed by a blank line
    - rule: "embedded-rbs-spacing"
      severity: convention

    # Method annotations must sit directly above the method definition
    - rule: "method-comment-spacing"
      severity: convention

    # `@rbs @ivar`, `@@cvar` and `self.@civar` comments must be followed by a blank line
    - rule: "variable-comment-spacing"
      severity: convention

    # No other type annotations on methods marked `@rbs skip` or `@rbs override`
    - rule: "redundant-annotation-with-skip"
      severity: convention
"""[
    1:-1
]  # <--- this strips the leading and trailing newlines from this HEREDOC
