"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    ALIGNMENT_ERROR = 3


class RestProtocols(Enum):
    """Request protocols understood by the alignment service.

    Args:
        Enum (string): Protocol identifiers accepted in configuration.
    """

    CURRENT = "current"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    ENV_LOG_LEVEL = "DEPALIGN_LOG_LEVEL"

    # Alignment service
    DA_URL = "http://localhost:8080/da/rest/v-1"
    DA_LOOKUP_PATH = "/reports/lookup/gavs"
    REPOSITORY_GROUP = "DA"
    VERSION_SUFFIX = "redhat"
    REST_PROTOCOL = RestProtocols.CURRENT.value
    CHUNK_SPLIT_COUNT = 4
    VERSION_INCREMENTAL_PADDING = 5

    # Files
    MANIPULATION_FILE_NAME = "manipulation.json"
    LOCKS_DIR = "gradle/dependency-locks"
    LOCKFILE_SUFFIX = ".lockfile"
    DEFAULT_PROJECT_VERSION = "unspecified"

    # Collector policy for host "strict" conflict resolution: "warn" or "fail"
    STRICT_CONFLICT_POLICIES = ["warn", "fail"]
    STRICT_CONFLICT_POLICY = "warn"

    DEFAULT_WORKERS = 4
