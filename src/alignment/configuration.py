"""Runtime configuration for an alignment run."""

from dataclasses import dataclass

from constants import Constants


@dataclass
class AlignmentConfiguration:
    """Settings consumed by the collector, the service client and the assembler."""
    da_url: str = Constants.DA_URL
    repository_group: str = Constants.REPOSITORY_GROUP
    version_suffix: str = Constants.VERSION_SUFFIX
    rest_protocol: str = Constants.REST_PROTOCOL
    request_timeout: float = Constants.REQUEST_TIMEOUT
    ignore_unresolvable_dependencies: bool = False
    version_modification_enabled: bool = True
    strict_conflict_resolution: str = Constants.STRICT_CONFLICT_POLICY
