"""Settings CLI commands for nencho.

Manages settings.json - CSV parsing and output preferences.
"""

import click

from nencho.sdk import (
    ConfigError,
    Settings,
    get_effective_settings,
    get_settings_path,
    load_settings,
    set_setting,
    unset_setting,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - flag_value: marker accepted in the 退職 / 乙欄 columns (default: Yes)
    - csv_encoding: encoding of CSV exports (default: utf-8-sig)
    - default_output_format: text or json for 'verify' (default: text)
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their effective values."""
    settings_path = get_settings_path()
    try:
        current = load_settings()
        effective = get_effective_settings()
    except ConfigError as e:
        raise click.ClickException(str(e))

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    click.echo("Effective settings:")
    for key, value in effective.model_dump().items():
        source = "" if key in current else " (default)"
        click.echo(f"  {key}: {value}{source}")


@settings.command("set")
@click.argument("key", type=click.Choice(list(Settings.model_fields)))
@click.argument("value")
def settings_set(key, value):
    """Set a setting.

    Examples:
        nencho settings set flag_value ○
        nencho settings set csv_encoding cp932
    """
    try:
        path = set_setting(key, value)
    except ConfigError as e:
        raise click.ClickException(str(e))

    click.echo(f"Set {key}: {value}")
    click.echo(f"Saved to: {path}")


@settings.command("unset")
@click.argument("key", type=click.Choice(list(Settings.model_fields)))
def settings_unset(key):
    """Remove a setting, reverting it to the default."""
    try:
        removed = unset_setting(key)
    except ConfigError as e:
        raise click.ClickException(str(e))

    if removed:
        click.echo(f"Cleared {key}.")
    else:
        click.echo(f"{key} was not set.")
