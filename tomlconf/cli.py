"""Demo application for tomlconf: prints a configured line a configured number of times."""

import os
import sys
import logging
from dataclasses import dataclass

import click

from .config import ConfigData, ConfigSerialize
from .errors import ConfigError
from .paths import find_path

# Module-level logger
logger = logging.getLogger(__name__)


@dataclass
class DemoConfig(ConfigData, ConfigSerialize):
    DEFAULT = 'output = "hi"\nnumber = 3\n'

    output: str
    number: int


# -- Helpers ------------------------------------------------------------------
def _setup(ctx):
    """Set up the demo config file, or exit with a message on failure."""
    o = ctx.obj
    try:
        outcome = DemoConfig.setup(o['qualifier'], o['organization'], o['application'], o['filename'])
    except ConfigError as e:
        click.echo(f"Setup failed: {e}", err=True)
        sys.exit(1)
    # Tell the user whether a file was found or a default one was written
    click.echo(outcome.message, err=True)
    return outcome.config


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose debug output')
@click.option('--qualifier', default='com', show_default=True, help='Reverse-domain qualifier (used on macOS)')
@click.option('--organization', default='Example', show_default=True, help='Organization name')
@click.option('--application', default='Demo', show_default=True, help='Application name')
@click.option('--filename', default='config.toml', show_default=True, help='Config file name')
@click.pass_context
def cli(ctx, verbose, qualifier, organization, application, filename):
    """Demo application for tomlconf."""
    # Check environment override for verbosity
    envv = os.environ.get('TOMLCONF_VERBOSE', '')
    if envv.lower() in ('1', 'true', 'yes'):
        verbose = True
    # Configure logging
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj.update(
        verbose=verbose,
        qualifier=qualifier,
        organization=organization,
        application=application,
        filename=filename,
    )


@cli.command()
@click.pass_context
def path(ctx):
    """Print where the config file lives."""
    o = ctx.obj
    try:
        p = find_path(o['qualifier'], o['organization'], o['application'], o['filename'])
    except ConfigError as e:
        click.echo(f"Setup failed: {e}", err=True)
        sys.exit(1)
    click.echo(str(p))


@cli.command()
@click.pass_context
def run(ctx):
    """Load (or create) the config and print `output` `number` times."""
    cfg = _setup(ctx)
    logger.debug("run command called with %r", cfg)
    for i in range(cfg.number):
        click.echo(f"{i}: {cfg.output}")


@cli.command()
@click.pass_context
def show(ctx):
    """Report the state of the config file without creating it."""
    o = ctx.obj
    found = DemoConfig.find(o['qualifier'], o['organization'], o['application'], o['filename'])
    click.echo(str(found))
    if found.ok:
        click.echo(f"output = {found.config.output!r}")
        click.echo(f"number = {found.config.number}")
    elif found.error is not None:
        sys.exit(1)


@cli.command(name='set')
@click.argument('key', type=click.Choice(['output', 'number']))
@click.argument('value')
@click.pass_context
def set_value(ctx, key, value):
    """Change one setting and save the file."""
    cfg = _setup(ctx)
    if key == 'number':
        try:
            value = int(value)
        except ValueError:
            click.echo(f"Invalid number: {value}", err=True)
            sys.exit(1)
        if value < 0:
            click.echo(f"Invalid number: {value}", err=True)
            sys.exit(1)
    setattr(cfg.data, key, value)
    try:
        cfg.save()
    except ConfigError as e:
        click.echo(f"Save failed: {e}", err=True)
        sys.exit(1)
    click.echo(f"Saved {key} to {cfg.path}")


@cli.command()
@click.pass_context
def reset(ctx):
    """Rewrite the default config, keeping a backup of the current file."""
    o = ctx.obj
    try:
        p = find_path(o['qualifier'], o['organization'], o['application'], o['filename'])
        DemoConfig.create(p, create_backup=True, create_parent=True)
    except ConfigError as e:
        click.echo(f"Reset failed: {e}", err=True)
        sys.exit(1)
    click.echo(f"Default configuration written to {p}")


def main():
    cli()

if __name__ == "__main__":
    main()
