"""Command line entry point: `s3deploy build|deploy|remove TARGET`."""

from __future__ import annotations

import os
import sys
from typing import Dict, Optional, Tuple

import click

from s3deploy.config.config import S3FileConfig, Settings, TargetsConfig
from s3deploy.core.exceptions import ConfigurationError, S3DeployError
from s3deploy.monitoring.metrics import export_textfile
from s3deploy.targets.context import RunContext
from s3deploy.targets.s3_file import S3FileTarget
from s3deploy.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _parse_vars(pairs: Tuple[str, ...]) -> Dict[str, str]:
    variables: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--var")
        variables[name] = value
    return variables


def _load_target(config_path: str, name: str) -> S3FileConfig:
    targets = TargetsConfig.from_yaml(config_path)
    target = targets.get_target(name)
    if target is None:
        known = ", ".join(t.name for t in targets.targets) or "none"
        raise ConfigurationError(f"target {name!r} not found in {config_path} (known: {known})")
    return target


def _context(
    config: S3FileConfig,
    target: S3FileTarget,
    cwd: str,
    environment: Optional[str],
    variables: Dict[str, str],
    dry_run: bool = False,
    dep_outs: Tuple[str, ...] = (),
) -> RunContext:
    scope: Dict[str, str] = {"TARGET": config.name}
    if environment:
        if environment not in config.environments:
            raise ConfigurationError(
                f"environment {environment!r} is not declared for {config.name}"
            )
        scope["ENV"] = environment
        scope.update(config.environments[environment])
    scope.update(variables)

    return RunContext(
        target_name=config.name,
        cwd=os.path.abspath(cwd),
        dry_run=dry_run,
        env=dict(os.environ),
        variables=scope,
        outs=target.outs(),
        dep_outs=list(dep_outs),
        environment=environment,
    )


def _run(ctx: click.Context, operation: str, target_name: str, **kwargs) -> None:
    settings: Settings = ctx.obj["settings"]
    try:
        config = _load_target(ctx.obj["config_path"], target_name)
        target = S3FileTarget(config)
        run_ctx = _context(config, target, **kwargs)

        if operation == "build":
            outs = target.build(run_ctx)
            click.echo("\n".join(outs))
        elif operation == "deploy":
            report = target.deploy(run_ctx)
            click.echo(f"uploaded {len(report)} file(s)")
        else:
            report = target.remove(run_ctx)
            click.echo(f"removed {len(report)} file(s)")
    except S3DeployError as exc:
        logger.error("command_failed", command=operation, target=target_name, error=str(exc))
        click.echo(f"error: {exc}", err=True)
        sys.exit(1)
    finally:
        if settings.metrics_file:
            export_textfile(settings.metrics_file)


@click.group()
@click.option(
    "--config",
    "config_path",
    default="s3deploy.yaml",
    show_default=True,
    type=click.Path(dir_okay=False),
    help="YAML file declaring the targets.",
)
@click.option("--log-level", default=None, help="Log level (default: S3DEPLOY_LOG_LEVEL or INFO).")
@click.option("--json-logs", is_flag=True, default=False, help="Render logs as JSON.")
@click.pass_context
def cli(ctx: click.Context, config_path: str, log_level: Optional[str], json_logs: bool) -> None:
    """Build, deploy and remove s3_file targets."""
    settings = Settings.from_env()
    if log_level:
        settings.log_level = log_level
    if json_logs:
        settings.json_logs = True
    configure_logging(settings)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["config_path"] = config_path


_cwd_option = click.option(
    "--cwd", default=".", show_default=True, type=click.Path(file_okay=False), help="Working directory."
)
_env_option = click.option("--env", "environment", default=None, help="Environment overlay to apply.")
_var_option = click.option("--var", "var_pairs", multiple=True, help="Extra KEY=VALUE variable.")


@cli.command()
@click.argument("target_name")
@_cwd_option
@_env_option
@_var_option
@click.option("--dep-out", "dep_outs", multiple=True, help="Dependency output to pack (repeatable).")
@click.pass_context
def build(ctx, target_name, cwd, environment, var_pairs, dep_outs):
    """Produce the outputs of TARGET_NAME."""
    _run(
        ctx,
        "build",
        target_name,
        cwd=cwd,
        environment=environment,
        variables=_parse_vars(var_pairs),
        dep_outs=dep_outs,
    )


@cli.command()
@click.argument("target_name")
@_cwd_option
@_env_option
@_var_option
@click.option("--dry-run", is_flag=True, help="Resolve everything but skip network calls.")
@click.pass_context
def deploy(ctx, target_name, cwd, environment, var_pairs, dry_run):
    """Upload the outputs of TARGET_NAME."""
    _run(
        ctx,
        "deploy",
        target_name,
        cwd=cwd,
        environment=environment,
        variables=_parse_vars(var_pairs),
        dry_run=dry_run,
    )


@cli.command()
@click.argument("target_name")
@_cwd_option
@_env_option
@_var_option
@click.option("--dry-run", is_flag=True, help="Resolve everything but skip network calls.")
@click.pass_context
def remove(ctx, target_name, cwd, environment, var_pairs, dry_run):
    """Delete the remote objects of TARGET_NAME."""
    _run(
        ctx,
        "remove",
        target_name,
        cwd=cwd,
        environment=environment,
        variables=_parse_vars(var_pairs),
        dry_run=dry_run,
    )


if __name__ == "__main__":
    cli()
