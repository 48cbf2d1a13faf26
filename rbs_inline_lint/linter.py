"""Run rules over Ruby sources and collect violations."""
import glob
import os
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import structlog

from rbs_inline_lint.config import DEFAULT_SEVERITY, Config
from rbs_inline_lint.model import SourceUnit
from rbs_inline_lint.rules import RULES
from rbs_inline_lint.source import load_file

LOGGER = structlog.get_logger(__name__)

SEVERITY_CODES = {"info": "I", "convention": "C", "warning": "W", "error": "E"}
GLOB_MAGIC_RE = re.compile(r"[*?[]")
RUBY_EXTENSIONS = (".rb", ".rbi", ".rake", ".gemspec", ".ru")


@dataclass(frozen=True)
class Violation:
    path: str
    line: int
    column: int
    rule: str
    severity: str
    message: str

    def format(self) -> str:
        code = SEVERITY_CODES[self.severity]
        return f"{self.path}:{self.line}:{self.column}: {code}: [{self.rule}] {self.message}"


def rule_configs(config: Optional[Config] = None) -> Dict[str, dict]:
    """
    Resolve which rules run and with which options.

    Without a config file every rule runs with its defaults. With one, only
    the listed rules run, with the listed options layered over the defaults.

    :param config: Loaded configuration, if any.
    :return: Options keyed by rule name.
    """
    configs = {}
    for rulename, rulecls in RULES.items():
        configs[rulename] = {"severity": DEFAULT_SEVERITY, **rulecls.defaults()}
    if config is None:
        return configs

    # override the defaults with the config file
    enabled = {}
    for rule in config["rules"]:
        options = {**configs[rule["rule"]], **rule}
        del options["rule"]
        if not options.pop("enabled", True):
            continue
        enabled[rule["rule"]] = options
    return enabled


def lint_source(source: SourceUnit, configs: Dict[str, dict]) -> List[Violation]:
    """
    Run the configured rules over one source.

    :param source: Source to lint.
    :param configs: Rule options as returned by rule_configs.
    :return: Violations in source order.
    """
    violations = []
    for rulename, options in configs.items():
        instance = RULES[rulename]()
        for offense in instance(options, source):
            line, column = source.location(offense.range.start)
            violations.append(
                Violation(
                    path=source.path,
                    line=line,
                    column=column,
                    rule=rulename,
                    severity=options["severity"],
                    message=offense.message,
                )
            )
    violations.sort(key=lambda v: (v.line, v.column, v.rule, v.message))
    return violations


def lint_file(ruby_file: str, configs: Dict[str, dict]) -> List[Violation]:
    """Load a Ruby file and lint it. Raises SourceError if it cannot be read."""
    source = load_file(ruby_file)
    violations = lint_source(source, configs)
    LOGGER.debug("Linted file", path=ruby_file, violations=len(violations))
    return violations


def _ruby_files(directory: str) -> List[str]:
    found = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for name in sorted(files):
            if name.endswith(RUBY_EXTENSIONS):
                found.append(os.path.join(root, name))
    return found


def collect_files(patterns: Iterable[str]) -> List[str]:
    """
    Expand paths, directories and glob patterns into Ruby files.

    Directories are searched recursively for Ruby files. Explicitly named
    files are kept whatever their extension. Duplicates are dropped.

    :param patterns: File paths, directories or glob patterns.
    :return: File paths in discovery order.
    """
    collected: List[str] = []
    for pattern in patterns:
        is_glob = GLOB_MAGIC_RE.search(pattern) is not None
        matches = sorted(glob.glob(pattern, recursive=True)) if is_glob else [pattern]
        if not matches:
            LOGGER.warning("Pattern matched no files", pattern=pattern)
        for path in matches:
            if os.path.isdir(path):
                candidates = _ruby_files(path)
            elif is_glob and not path.endswith(RUBY_EXTENSIONS):
                continue
            else:
                candidates = [path]
            for candidate in candidates:
                if candidate not in collected:
                    collected.append(candidate)
    LOGGER.debug("Collected files", count=len(collected))
    return collected
