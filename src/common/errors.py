"""Exception taxonomy for the alignment engine."""


class AlignmentError(Exception):
    """Base class for all failures surfaced to the invoking build."""


class UnresolvedDependencyError(AlignmentError):
    """A declared external dependency could not be resolved."""


class AlignmentServiceError(AlignmentError):
    """Network, protocol or body-decoding failure talking to the alignment service."""


class InvalidProtocolError(AlignmentError):
    """An unsupported request protocol identifier was configured."""


class ModelLookupError(AlignmentError):
    """A module path has no corresponding node in the manipulation model."""


class InvalidArgumentError(AlignmentError, ValueError):
    """An empty or otherwise unusable argument was supplied."""


class ManipulationFileError(AlignmentError):
    """A persisted manipulation file could not be read or failed validation."""


class ConfigurationError(AlignmentError):
    """Configuration values are missing or invalid."""
