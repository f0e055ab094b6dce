# Concept schema and operation request/response models.
from typing import Optional, List, Dict, Literal

from pydantic import BaseModel, Field


Importance = Literal["low", "medium", "high"]
Diversity = Literal["low", "medium", "high"]


class Concept(BaseModel):
    name: str
    description: str = ""
    # Parent/child concept names; may point at concepts not yet in the graph.
    parents: List[str] = Field(default_factory=list)
    children: List[str] = Field(default_factory=list)
    layer: Optional[int] = None


class ExtendedConcept(Concept):
    # Score range checks live in validate_extended_concept so that a bad model
    # reply becomes an OutputValidationError rather than a pydantic error.
    # Operations pass importance through normalize_importance first.
    attention_score: Optional[float] = None
    validation_score: Optional[float] = None
    importance: Optional[Importance] = None


# A concept graph is a plain name-keyed mapping.
ConceptGraph = Dict[str, Concept]


class ConceptRequest(BaseModel):
    concept: Concept


class ConceptListRequest(BaseModel):
    concepts: List[Concept]


class ExploreRequest(BaseModel):
    concept: Concept
    diversity: Diversity = "high"


class RefocusRequest(BaseModel):
    concepts: List[Concept]
    goal: str


class TracePathRequest(BaseModel):
    start: Concept
    end: Concept


class ProgressiveExpandRequest(BaseModel):
    concept: Concept
    previous_layers: List[Concept] = []


class OperationResponse(BaseModel):
    operation: str
    concepts: List[ExtendedConcept]


class GraphMergeRequest(BaseModel):
    graph: List[ExtendedConcept] = []
    concepts: List[ExtendedConcept]


class GraphResponse(BaseModel):
    concepts: List[ExtendedConcept]
    total: int
