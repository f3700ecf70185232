"""Argument parsing functionality for plugfetch."""

import argparse
from constants import OutputFormats


def _add_common_options(parser):
    """Options shared by every subcommand."""
    parser.add_argument("plugin_id",
                        help="Plugin identifier, i.e: grafana-clock-panel")
    parser.add_argument("-v", "--version",
                        dest="VERSION",
                        help="Plugin version to select (default: latest supported)",
                        action="store", type=str,
                        default="")
    parser.add_argument("-g", "--grafana-version",
                        dest="GRAFANA_VERSION",
                        help="Grafana version sent to the registry as compatibility context",
                        action="store", type=str)
    parser.add_argument("--repo-url",
                        dest="REPO_URL",
                        help="Plugin repository API root",
                        action="store", type=str)
    parser.add_argument("--platform",
                        dest="PLATFORM",
                        help="Platform key to resolve for, i.e: linux-amd64 (default: detected)",
                        action="store", type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="HTTP timeout in seconds",
                        action="store", type=float)
    parser.add_argument("--insecure",
                        dest="SKIP_TLS_VERIFY",
                        help="Skip TLS certificate verification",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: PLUGFETCH_LOG_LEVEL, then INFO)",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store", type=str)


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="plugfetch",
        description="plugfetch - resolve and download plugin archives from a plugin repository",
        add_help=True,
    )
    sub = parser.add_subparsers(dest="action", required=True)

    resolve = sub.add_parser("resolve", help="Print the version, checksum and archive URL to download")
    _add_common_options(resolve)
    resolve.add_argument("-f", "--format",
                         dest="OUTPUT_FORMAT",
                         help="Output format (text or json)",
                         action="store",
                         type=str.lower,
                         choices=[f.value for f in OutputFormats],
                         default=OutputFormats.TEXT.value)

    download = sub.add_parser("download", help="Download and verify the selected plugin archive")
    _add_common_options(download)
    download.add_argument("-o", "--output",
                          dest="OUTPUT",
                          help="Destination path for the archive",
                          action="store", type=str,
                          required=True)

    return parser.parse_args(argv)
