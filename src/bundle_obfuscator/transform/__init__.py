"""Transform contract, external command adapter and batch execution."""

from .base import TransformError, TransformFn, TransformResult, identity_transform
from .batch import BatchProcessor, BatchReport, SourceSink, partition
from .command import CommandTransform, render_options
from .scratch import ScratchLayout

__all__ = [
    "BatchProcessor",
    "BatchReport",
    "CommandTransform",
    "ScratchLayout",
    "SourceSink",
    "TransformError",
    "TransformFn",
    "TransformResult",
    "identity_transform",
    "partition",
    "render_options",
]
