from .concept import (
    Concept,
    ConceptGraph,
    ConceptListRequest,
    ConceptRequest,
    Diversity,
    ExploreRequest,
    ExtendedConcept,
    GraphMergeRequest,
    GraphResponse,
    Importance,
    OperationResponse,
    ProgressiveExpandRequest,
    RefocusRequest,
    TracePathRequest,
)

__all__ = [
    "Concept",
    "ConceptGraph",
    "ConceptListRequest",
    "ConceptRequest",
    "Diversity",
    "ExploreRequest",
    "ExtendedConcept",
    "GraphMergeRequest",
    "GraphResponse",
    "Importance",
    "OperationResponse",
    "ProgressiveExpandRequest",
    "RefocusRequest",
    "TracePathRequest",
]
