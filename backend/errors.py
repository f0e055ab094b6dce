"""
Error taxonomy for concept graph operations.

Every failure inside an operation surfaces as one of these. The HTTP layer maps
them onto status codes in main.py; scripts catch ConceptGraphError.
"""
from typing import List, Optional


class ConceptGraphError(Exception):
    """Base class for all concept graph failures."""


class InputValidationError(ConceptGraphError):
    """A supplied concept, concept list or scalar argument is invalid.

    Always raised before any LLM call is attempted.
    """


class GatewayError(ConceptGraphError):
    """The LLM backend is unconfigured, unreachable, or returned nothing."""


class ExtractionError(ConceptGraphError):
    """No JSON array could be recovered from the model's reply."""


class OutputValidationError(ConceptGraphError):
    """A generated concept failed schema validation after normalization."""

    def __init__(self, operation: str, concept_name: Optional[str]):
        self.operation = operation
        self.concept_name = concept_name or "unknown"
        super().__init__(f"Invalid concept in {operation} result: {self.concept_name}")


class GraphCycleError(ConceptGraphError):
    """The graph contains a parent/child cycle, so no hierarchy exists."""

    def __init__(self, cycle: List[str]):
        self.cycle = list(cycle)
        super().__init__(f"Cycle detected in concept graph: {' -> '.join(self.cycle)}")
