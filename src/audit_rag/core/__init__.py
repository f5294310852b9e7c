"""
Core module - shared protocols, result types, and errors.

USAGE:
------
from audit_rag.core import CollectionSource, VectorCodec

class MySource:
    '''Implements CollectionSource protocol.'''
    ...
"""

from audit_rag.core.errors import (
    CollectionLoadError,
    ErrorCategory,
    RagError,
    RagInitializationError,
    VectorFileError,
)
from audit_rag.core.protocols import (
    # Protocols
    CollectionSource,
    VectorCodec,
    # Data classes
    QuantizedVector,
    SearchAllResult,
)

__all__ = [
    # Protocols
    "CollectionSource",
    "VectorCodec",
    # Data classes
    "QuantizedVector",
    "SearchAllResult",
    # Errors
    "ErrorCategory",
    "RagError",
    "CollectionLoadError",
    "RagInitializationError",
    "VectorFileError",
]
