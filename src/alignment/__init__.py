"""Cross-module dependency alignment.

This package provides the alignment engine:
- collector.py: per-module dependency collection (locks and prior-run pins)
- cache.py: build-scoped aggregation and completion detection
- translator.py: REST alignment service client and response decoding
- service.py: alignment request/response and new project version
- model.py / io.py: the manipulation model tree and its persisted file
- assembler.py: maps alignment results onto the tree
- task.py: the per-module task and the build-wide run
"""

from .assembler import ModelAssembler
from .cache import BuildCache, BuildCacheRegistry
from .collector import DependencyCollector, ResolutionPort, ResolutionResult, ResolvedDependency
from .configuration import AlignmentConfiguration
from .io import read_manipulation_model, write_manipulation_model
from .model import ManipulationModel
from .module import Module
from .service import AlignmentService, Request, Response
from .task import AlignmentTask, run_alignment
from .translator import AlignmentServiceClient, RestProtocol, decode_response

__all__ = [
    "AlignmentConfiguration",
    "AlignmentService",
    "AlignmentServiceClient",
    "AlignmentTask",
    "BuildCache",
    "BuildCacheRegistry",
    "DependencyCollector",
    "ManipulationModel",
    "ModelAssembler",
    "Module",
    "Request",
    "ResolutionPort",
    "ResolutionResult",
    "ResolvedDependency",
    "Response",
    "RestProtocol",
    "decode_response",
    "read_manipulation_model",
    "run_alignment",
    "write_manipulation_model",
]
