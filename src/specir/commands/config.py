"""Config commands -- view and modify global configuration.

Provides the ``specir config`` sub-command group for reading, updating, and
resetting the user's global configuration file
(:class:`~specir.models.GlobalConfig`). Settings control the default output
format and the resolver options (default tag, excluded parameters, media
type priority).
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from specir.exceptions import SpecirError
from specir.output import emit, error, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        specir config show
        specir config show --json
    """
    from specir.config import get_config_dir, load_global_config

    try:
        config = load_global_config()
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    emit(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'resolver.default_tag')."
    ),
    value: str = typer.Argument(help="Value to set. Lists are comma-separated."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. List settings take a comma-separated
    value. The updated config is validated against
    :class:`~specir.models.GlobalConfig` before saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid or validation
            fails.

    Example::

        specir config set output.format json
        specir config set resolver.default_tag Api
        specir config set resolver.excluded_parameters X-Trace-Id,X-Tenant
    """
    from specir.config import load_global_config, save_global_config
    from specir.models import GlobalConfig

    try:
        config = load_global_config()
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    if isinstance(target[final_key], list):
        coerced: object = [item.strip() for item in value.split(",") if item.strip()]
    else:
        coerced = value
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        specir config reset
        specir --force config reset
    """
    from specir.config import save_global_config
    from specir.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
