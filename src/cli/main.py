"""Main CLI entry point for the wikifs command.

This module provides the Typer application that mounts a DokuWiki as a
local directory. It uses options on the main command rather than
subcommands for a simpler user experience.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.config import ConfigLoader
from src.cli.errors import CLIError, ConfigError, ConfigNotFoundError, MountError
from src.cli.models import ExitCode, MountConfig
from src.cli.output import OutputHandler
from src.wiki_client.api_wrapper import WikiAPIWrapper
from src.wiki_client.auth import Authenticator
from src.wiki_client.errors import APIUnreachableError, InvalidCredentialsError, WikiError
from src.wiki_fs.models import Mode
from src.wiki_fs.poller import SyncPoller
from src.wiki_fs.wiki_filesystem import WikiFilesystem

app = typer.Typer(
    name="wikifs",
    help="""Mount a DokuWiki as a local directory.

QUICK START:
  wikifs --init --url <xmlrpc_url>     # Write .wikifs/config.yaml
  wikifs <mountpoint>                  # Mount pages
  wikifs <mountpoint> --media          # Mount media files

Credentials are read from DOKUWIKI_USER and DOKUWIKI_PASSWORD (or a .env file).""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)

GETTING_STARTED_MESSAGE = """wikifs --init --url <xmlrpc_url>     # Initialize
wikifs <mountpoint>                  # Mount pages
wikifs <mountpoint> --media          # Mount media files
--help                               # Show all options

Example:
  wikifs --init --url https://wiki.example.com/lib/exe/xmlrpc.php
  wikifs ~/wiki

Write to a page with a first line starting with "%" to set the edit summary:
  % Fixed typo
  ====== Start ======"""

# How long unmount waits for a running synchronization pass
POLLER_STOP_TIMEOUT = 30


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"wikifs_{timestamp}.log"

        # Thread name distinguishes kernel requests from the sync poller
        file_format = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _mount_filesystem(filesystem: WikiFilesystem, mountpoint: str) -> None:
    """Hand the filesystem to FUSE; returns once it is unmounted.

    fusepy locates libfuse when it is imported, so the import happens here
    rather than at module level.
    """
    try:
        from src.cli.fuse_host import mount
    except (ImportError, OSError) as e:
        raise MountError(mountpoint, f"FUSE is not available ({e})")
    mount(filesystem, mountpoint, foreground=True)


def _run_init(url: str, config_path: str, media: bool, verbosity: int, no_color: bool) -> None:
    """Write a configuration file with defaults.

    Args:
        url: XML-RPC endpoint of the wiki
        config_path: Where to write the configuration
        media: Mount media files instead of pages
        verbosity: Verbosity level
        no_color: Whether to disable colored output
    """
    _configure_logging(verbosity)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        if os.path.exists(config_path):
            raise ConfigError(f"{config_path} already exists")

        config = ConfigLoader._parse_config({
            'url': url,
            'mode': Mode.MEDIA.value if media else Mode.PAGES.value,
        })
        ConfigLoader.save(config_path, config)

        output.success("Configuration initialized successfully")
        output.info(f"  Config file: {config_path}")
        output.info("")
        output.info("Next steps:")
        output.info("  1. Put DOKUWIKI_USER and DOKUWIKI_PASSWORD in .env (optional)")
        output.info("  2. Run 'wikifs <mountpoint>'")
        raise typer.Exit(ExitCode.SUCCESS)

    except CLIError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(f"Initialization failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


def _build_filesystem(config: MountConfig) -> WikiFilesystem:
    authenticator = Authenticator(config.url)
    api = WikiAPIWrapper(authenticator, timeout=config.timeout, verify_ssl=config.verify_ssl)
    return WikiFilesystem(
        api,
        mode=config.mode,
        cache_size=config.cache_size,
        page_extension=config.page_extension,
        namespace=config.namespace,
        clock_skew=config.clock_skew,
    )


def _run_mount(
    mountpoint: str,
    config_path: str,
    media: bool,
    logdir: Optional[str],
    verbosity: int,
    no_color: bool
) -> None:
    """Load the wiki index, start the poller and serve the mount.

    Args:
        mountpoint: Existing local directory to mount on
        config_path: Configuration file to load
        media: Mount media files instead of pages (overrides config)
        logdir: Directory for log files
        verbosity: Verbosity level
        no_color: Whether to disable colored output
    """
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        config = ConfigLoader.load(config_path)
        if media:
            config.mode = Mode.MEDIA

        if not os.path.isdir(mountpoint):
            raise MountError(mountpoint, "not a directory")

        filesystem = _build_filesystem(config)
        with output.spinner(f"Connecting to {config.url}..."):
            wiki_version = filesystem.store.api.get_version()
        logger.info(f"Connected to DokuWiki {wiki_version}")
        output.debug(f"DokuWiki version: {wiki_version}")

        with output.spinner(f"Loading {config.mode.value} index..."):
            entries = filesystem.mount()
        output.print_mount_summary(
            filesystem.store.api.info()['url'],
            config.mode.value,
            entries,
            mountpoint,
        )

        poller = SyncPoller(filesystem, interval=config.poll_interval)
        poller.start()
        try:
            _mount_filesystem(filesystem, mountpoint)
        finally:
            poller.stop(timeout=POLLER_STOP_TIMEOUT)

        output.info(f"Unmounted {mountpoint}")
        raise typer.Exit(ExitCode.SUCCESS)

    except typer.Exit:
        raise

    except ConfigNotFoundError as e:
        output.error(str(e))
        output.print("Run 'wikifs --init --url <xmlrpc_url>' first.")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except CLIError as e:
        logger.error(str(e))
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except InvalidCredentialsError as e:
        logger.error(str(e))
        output.error(f"Authentication failed: {e}")
        raise typer.Exit(ExitCode.AUTH_ERROR)

    except APIUnreachableError as e:
        logger.error(str(e))
        output.error(str(e))
        raise typer.Exit(ExitCode.NETWORK_ERROR)

    except WikiError as e:
        logger.error(str(e))
        output.error(f"Wiki error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except Exception as e:
        logger.exception("Unexpected error while mounting")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


@app.command()
def main_command(
    mountpoint: Optional[str] = typer.Argument(
        None,
        help="Directory to mount the wiki on",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Write a configuration file (requires --url)",
    ),
    init_url: Optional[str] = typer.Option(
        None,
        "--url",
        help="XML-RPC endpoint, e.g. https://wiki.example.com/lib/exe/xmlrpc.php (used with --init)",
        metavar="URL",
    ),
    config_path: str = typer.Option(
        ConfigLoader.default_path(),
        "--config",
        help="Configuration file",
        metavar="PATH",
    ),
    media: bool = typer.Option(
        False,
        "--media",
        help="Mount media files instead of pages",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        count=True,
        help="Increase verbosity (-v info, -vv debug)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Mount a DokuWiki as a local directory.

    \b
    QUICK START:
      wikifs --init --url https://wiki.example.com/lib/exe/xmlrpc.php
      wikifs ~/wiki
      wikifs ~/wiki-media --media

    \b
    EDITING:
      Pages appear as <name>.dw files. A first line starting with "%" is
      used as the edit summary and removed from the page. Saving a page
      with only a summary line deletes it.
    """
    if version:
        typer.echo("wikifs version 0.1.0")
        raise typer.Exit()

    if init or init_url is not None:
        if not init or init_url is None:
            typer.echo("Error: --init and --url must be used together", err=True)
            typer.echo("")
            typer.echo("Example:")
            typer.echo("  wikifs --init --url https://wiki.example.com/lib/exe/xmlrpc.php")
            raise typer.Exit(ExitCode.GENERAL_ERROR)

        _run_init(init_url, config_path, media, verbosity, no_color)
        return

    if mountpoint is None:
        typer.echo(GETTING_STARTED_MESSAGE)
        raise typer.Exit()

    _run_mount(mountpoint, config_path, media, logdir, verbosity, no_color)


def main() -> None:
    """Main entry point for the CLI application."""
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
