"""plugfetch - resolve and download plugin archives from a plugin repository.

    Returns:
        int: Exit code
"""
import json
import logging
import sys

import yaml

from args import parse_args
from cli_config import load_configuration
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes, OutputFormats
from repository.errors import (
    ChecksumMismatchError,
    RepositoryConnectionError,
    RepositoryError,
    VersionResolutionError,
)
from repository.service import RepositoryService
from versioning.models import CompatibilityOptions

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    configure_logging(getattr(args, "LOG_LEVEL", None))
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def format_selection(selection, output_format):
    """Render a DownloadSelection for the console."""
    if output_format == OutputFormats.JSON.value:
        return json.dumps(selection.to_dict(), indent=2)
    return "\n".join([
        f"version:  {selection.version}",
        f"checksum: {selection.checksum or '(none)'}",
        f"url:      {selection.archive_url}",
    ])


def run(args, service=None):
    """Execute the parsed command and return an exit code."""
    service = service or RepositoryService.from_constants()
    opts = CompatibilityOptions(
        grafana_version=Constants.GRAFANA_VERSION,
        platform=getattr(args, "PLATFORM", None),
    )
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action)
        )

    try:
        if args.action == "resolve":
            selection = service.get_download_options(args.plugin_id, args.VERSION, opts)
            print(format_selection(selection, args.OUTPUT_FORMAT))
        else:
            archive = service.download(args.plugin_id, args.VERSION, opts)
            try:
                path = archive.move_to(args.OUTPUT)
            except OSError as exc:
                archive.cleanup()
                logger.error("Could not write archive to %s: %s", args.OUTPUT, exc)
                return ExitCodes.FILE_ERROR.value
            print(path)
    except VersionResolutionError as exc:
        logger.error("%s", exc)
        return ExitCodes.RESOLUTION_ERROR.value
    except ChecksumMismatchError as exc:
        logger.error("%s. Please try downloading again.", exc)
        return ExitCodes.INTEGRITY_ERROR.value
    except RepositoryConnectionError as exc:
        logger.error("%s", exc)
        return ExitCodes.CONNECTION_ERROR.value
    except RepositoryError as exc:
        logger.error("Plugin repository error: %s", exc)
        return ExitCodes.CONNECTION_ERROR.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    try:
        load_configuration(args)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        logger.error("Failed to load configuration: %s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
