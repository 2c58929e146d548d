#!/usr/bin/env python3
"""fieldmask CLI - inspect strategies and validate policy files."""

import sys
from pathlib import Path

import click

from fieldmask.core.config import MaskingConfig
from fieldmask.core.exceptions import FieldMaskError
from fieldmask.core.policy_loader import PolicyLoader
from fieldmask.masking.engine import MaskEngine


def _build_engine(config_path: str | None) -> MaskEngine:
    if config_path:
        return MaskEngine.from_config(MaskingConfig.from_file(config_path))
    return MaskEngine.from_config(MaskingConfig.from_env())


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True),
    help="Path to a fieldmask configuration YAML file",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """fieldmask - declarative masking of sensitive record fields."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def _engine(ctx: click.Context) -> MaskEngine:
    try:
        return _build_engine(ctx.obj.get("config_path"))
    except FieldMaskError as e:
        raise click.ClickException(e.message) from e


@cli.command()
@click.pass_context
def strategies(ctx: click.Context) -> None:
    """List the registered strategy names."""
    for name in _engine(ctx).catalog.names():
        click.echo(name)


@cli.command()
@click.argument("strategy")
@click.argument("value")
@click.pass_context
def preview(ctx: click.Context, strategy: str, value: str) -> None:
    """Show what STRATEGY does to VALUE."""
    resolved = _engine(ctx).catalog.resolve(strategy)
    if resolved is None:
        raise click.ClickException(f"Unknown strategy '{strategy}'")
    click.echo(resolved(value))


@cli.command("check-policy")
@click.argument("policy_file", type=click.Path(exists=True))
@click.pass_context
def check_policy(ctx: click.Context, policy_file: str) -> None:
    """Validate a policy YAML file against the registered strategies."""
    loader = PolicyLoader(_engine(ctx).catalog)
    try:
        policy = loader.load_policy(Path(policy_file))
    except FieldMaskError as e:
        raise click.ClickException(e.message) from e

    unknown = loader.find_unknown_strategies(policy)
    for field_name, strategy in sorted(unknown.items()):
        click.echo(f"✗ {field_name}: unknown strategy '{strategy}'", err=True)
    if unknown:
        raise click.ClickException(f"{len(unknown)} override(s) name unknown strategies")

    state = "disabled" if policy.disable_masking else "enabled"
    click.echo(f"✓ Policy OK: {len(policy.overrides)} override(s), masking {state}")


@cli.command()
def version() -> None:
    """Show fieldmask version."""
    from fieldmask import __version__

    click.echo(f"fieldmask v{__version__}")


def main() -> int:
    """Main entry point."""
    try:
        cli()
        return 0
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
