"""Argument parsing functionality for DepAlign."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="depalign",
        description=(
            "DepAlign - Align dependency versions across a multi-module build"
        ),
        add_help=True,
    )

    parser.add_argument("-b", "--build",
                        dest="BUILD",
                        help="Path to the build description (YAML or JSON)",
                        action="store",
                        type=str,
                        required=True)
    parser.add_argument("-o", "--output-dir",
                        dest="OUTPUT_DIR",
                        help="Directory holding manipulation.json (default: the build description's directory)",
                        action="store",
                        type=str)
    parser.add_argument("-w", "--workers",
                        dest="WORKERS",
                        help="Number of modules processed concurrently",
                        action="store",
                        type=int,
                        default=Constants.DEFAULT_WORKERS)

    # Alignment service
    parser.add_argument("--da-url",
                        dest="DA_URL",
                        help="Base URL of the alignment service",
                        action="store",
                        type=str)
    parser.add_argument("--repository-group",
                        dest="REPOSITORY_GROUP",
                        help="Repository group the alignment service searches",
                        action="store",
                        type=str)
    parser.add_argument("--version-suffix",
                        dest="VERSION_SUFFIX",
                        help="Version suffix used to pick candidate versions",
                        action="store",
                        type=str)
    parser.add_argument("--rest-protocol",
                        dest="REST_PROTOCOL",
                        help="Request protocol of the alignment service",
                        action="store",
                        type=str)
    parser.add_argument("--request-timeout",
                        dest="REQUEST_TIMEOUT",
                        help="Timeout in seconds for each alignment request",
                        action="store",
                        type=float)

    # Policy
    parser.add_argument("--ignore-unresolvable",
                        dest="IGNORE_UNRESOLVABLE",
                        help="Log and drop dependencies that cannot be resolved instead of failing",
                        action="store_true")
    parser.add_argument("--no-version-modification",
                        dest="NO_VERSION_MODIFICATION",
                        help="Do not rewrite the project version",
                        action="store_true")
    parser.add_argument("--strict-conflict-resolution",
                        dest="STRICT_CONFLICT_RESOLUTION",
                        help="What to do when a module uses strict conflict resolution",
                        action="store",
                        type=str,
                        choices=Constants.STRICT_CONFLICT_POLICIES)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
