"""entry point for rbs-inline-lint."""
import logging
import os
import sys
from typing import List, Optional, Tuple

import click
import structlog
from structlog.stdlib import LoggerFactory

from rbs_inline_lint.config import STUB, load_config
from rbs_inline_lint.errors import ConfigError, SourceError
from rbs_inline_lint.linter import Violation, collect_files, lint_file, rule_configs
from rbs_inline_lint.rules import RULES

LOGGER = structlog.get_logger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    structlog.configure(logger_factory=LoggerFactory())


@click.group()
@click.option("-c", "--config", type=click.Path(exists=True, dir_okay=False))
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config: Optional[os.PathLike], verbose: bool) -> None:
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = None
    if config is not None:
        click.echo(f"Load config file: {config}")
        try:
            ctx.obj["config"] = load_config(os.fspath(config))
        except ConfigError as e:
            click.echo(str(e), err=True)
            sys.exit(1)


@main.command()
@click.argument("paths", nargs=-1, type=click.Path())
@click.pass_context
def lint(ctx: click.Context, paths: Tuple[str, ...]) -> None:
    """Lint RBS::Inline annotation comments in Ruby files."""
    config = ctx.obj["config"]
    if paths:
        filenames = collect_files(paths)
    elif config is not None and config["files"]:
        filenames = collect_files(config["files"])
    else:
        click.echo("no files to lint: pass paths or use -c/--config with a 'files' list")
        sys.exit(1)

    ret = 0
    configs = rule_configs(config)
    violations: List[Violation] = []
    for ruby_file in filenames:
        try:
            file_violations = lint_file(ruby_file, configs)
        except SourceError as e:
            LOGGER.warning("Unable to lint file", path=e.path, error=str(e))
            click.echo(f"unable to lint {e}")
            ret = 1
            continue
        for violation in file_violations:
            click.echo(violation.format())
        violations.extend(file_violations)

    err_count = len(violations)
    errors_plural = "error" if err_count == 1 else "errors"
    files_plural = "file" if len(filenames) == 1 else "files"
    click.echo(f"{err_count} {errors_plural} found in {len(filenames)} {files_plural}")
    if err_count:
        ret = 1

    sys.exit(ret)


@main.command()
def stub() -> None:
    """Generate a stub configuration."""
    print(STUB)
    sys.exit(0)


@main.command()
def rules() -> None:
    """List the available rules."""
    for rulename, rulecls in RULES.items():
        summary = (rulecls.__doc__ or "").strip().splitlines()
        click.echo(f"{rulename}: {summary[0] if summary else ''}")
    sys.exit(0)


if __name__ == "__main__":
    main(obj={})
