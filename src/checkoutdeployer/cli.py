import logging
import os
import re

import click
from rich.console import Console
from rich.logging import RichHandler

from .constants import DEFAULT_BUILD_COMMAND, DEFAULT_DIST_DIR, DEFAULT_MAX_WORKERS
from .core import CheckoutDeployer, DeployerError
from .services.config_loader import ConfigLoader

ENVIRONMENT_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.argument("environment", required=False)
@click.option(
    "--project-dir",
    type=click.Path(file_okay=False),
    help="Checkout project root holding env.<environment>.json. Defaults to the current directory.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help="Path to a YAML defaults file. Defaults to .checkoutdeployer.yml in the project directory.",
)
@click.option("--dist-dir", required=False, help="Build output directory (default: dist).")
@click.option(
    "--build-command",
    required=False,
    help="Command that builds the checkout (default: npm run build).",
)
@click.option(
    "--max-workers",
    required=False,
    type=click.IntRange(min=1),
    default=None,
    help="Number of concurrent uploads per folder (default: 8).",
)
@click.option(
    "--loader-script",
    required=False,
    help="Loader script name used in the printed Script URL. Detected from the build by default.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    environment,
    project_dir,
    config,
    dist_dir,
    build_command,
    max_workers,
    loader_script,
    verbose,
    log_file,
):
    """Build the custom checkout and deploy it to a versioned WebDAV folder."""
    logger = logging.getLogger("checkoutdeployer")

    if not environment:
        Console().print(
            "[red]Please pass an environment (sandbox, production), "
            "e.g. `checkoutdeployer sandbox`.[/red]"
        )
        return

    if not ENVIRONMENT_PATTERN.match(environment):
        raise click.BadParameter(
            "use letters, digits, '-' or '_' only.",
            param_hint="ENVIRONMENT",
        )

    project_dir = project_dir or os.getcwd()

    try:
        config_loader = ConfigLoader()
        resolved_config = config or config_loader.find_default(project_dir)
        config_values = config_loader.load(resolved_config)
    except DeployerError as exc:
        raise click.ClickException(str(exc)) from exc

    dist_dir = _resolve_option(dist_dir, config_values, "dist_dir", default=DEFAULT_DIST_DIR)
    build_command = _resolve_option(
        build_command, config_values, "build_command", default=DEFAULT_BUILD_COMMAND
    )
    max_workers = int(
        _resolve_option(max_workers, config_values, "max_workers", default=DEFAULT_MAX_WORKERS)
    )
    loader_script = _resolve_option(loader_script, config_values, "loader_script")
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    deployer = CheckoutDeployer(
        environment=environment,
        project_dir=project_dir,
        dist_dir=dist_dir,
        build_command=build_command,
        max_workers=max_workers,
        loader_script=loader_script,
    )

    raise SystemExit(deployer.run())


if __name__ == "__main__":
    main()
