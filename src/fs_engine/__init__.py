"""
Filesystem traversal and mutation engine.

This package provides bounded, cancellable directory listing, tree rendering and
glob search, together with copy, move, delete and remove operations that report
failures as a small set of classified error kinds.
"""

from fs_engine.fs_engine_cancellation import FsEngineCancellationToken
from fs_engine.fs_engine_exceptions import (
    FsEngineAlreadyExistsError,
    FsEngineCancelledError,
    FsEngineError,
    FsEngineInvalidPathError,
    FsEngineIsADirectoryError,
    FsEngineNotADirectoryError,
    FsEngineNotFoundError,
    FsEnginePartialFailureError,
    FsEngineUnderlyingError,
)
from fs_engine.fs_engine_mutation import FsEngineMutation
from fs_engine.fs_engine_path_resolver import FsEnginePathResolver
from fs_engine.fs_engine_pattern_matcher import FsEnginePatternMatcher
from fs_engine.fs_engine_transfer import FsEngineTransfer
from fs_engine.fs_engine_traversal import FsEngineTraversal
from fs_engine.fs_engine_types import (
    FsEngineEntry,
    FsEngineErrorKind,
    FsEngineTransferPlan,
)

__all__ = [
    # Exceptions
    'FsEngineError',
    'FsEngineInvalidPathError',
    'FsEngineNotFoundError',
    'FsEngineNotADirectoryError',
    'FsEngineIsADirectoryError',
    'FsEngineAlreadyExistsError',
    'FsEngineCancelledError',
    'FsEnginePartialFailureError',
    'FsEngineUnderlyingError',
    # Types
    'FsEngineErrorKind',
    'FsEngineEntry',
    'FsEngineTransferPlan',
    # Core classes
    'FsEngineCancellationToken',
    'FsEnginePathResolver',
    'FsEnginePatternMatcher',
    'FsEngineTraversal',
    'FsEngineTransfer',
    'FsEngineMutation',
]
