"""
API endpoints for the concept graph operations.

Each endpoint is a thin wrapper: it validates the request body, runs one
operation and returns the generated concepts. Nothing is stored server-side;
the caller merges results into its own graph (see /graph/merge).
"""
from typing import Awaitable, List

from fastapi import APIRouter

from models import (
    Concept,
    ConceptListRequest,
    ConceptRequest,
    ExploreRequest,
    OperationResponse,
    ProgressiveExpandRequest,
    RefocusRequest,
    TracePathRequest,
)
from operations import (
    derive_parents,
    derive_summary,
    expand,
    expand_list,
    explore,
    progressive_expand,
    refocus,
    synthesize,
    trace_path,
    validate_links,
)

router = APIRouter(prefix="/operations", tags=["operations"])


async def _run(operation: str, pending: Awaitable[List[Concept]]) -> OperationResponse:
    # ConceptGraphError propagates to the handler registered in main.py
    concepts = await pending
    return OperationResponse(
        operation=operation,
        concepts=[c.model_dump() for c in concepts],
    )


@router.post("/expand", response_model=OperationResponse, response_model_exclude_none=True)
async def expand_endpoint(payload: ConceptRequest):
    """Generate sub-concepts of a concept."""
    return await _run("expand", expand(payload.concept))


@router.post("/expand-list", response_model=OperationResponse, response_model_exclude_none=True)
async def expand_list_endpoint(payload: ConceptListRequest):
    """Generate concepts growing out of several parent concepts."""
    return await _run("expand_list", expand_list(payload.concepts))


@router.post("/synthesize", response_model=OperationResponse, response_model_exclude_none=True)
async def synthesize_endpoint(payload: ConceptListRequest):
    """Generate hybrid concepts of all given concepts."""
    return await _run("synthesize", synthesize(payload.concepts))


@router.post("/derive-parents", response_model=OperationResponse, response_model_exclude_none=True)
async def derive_parents_endpoint(payload: ConceptRequest):
    """Generate prerequisite concepts of a concept."""
    return await _run("derive_parents", derive_parents(payload.concept))


@router.post("/explore", response_model=OperationResponse, response_model_exclude_none=True)
async def explore_endpoint(payload: ExploreRequest):
    """Generate sibling concepts plus parent updates that adopt them."""
    return await _run("explore", explore(payload.concept, payload.diversity))


@router.post("/refocus", response_model=OperationResponse, response_model_exclude_none=True)
async def refocus_endpoint(payload: RefocusRequest):
    """Score concepts against a learning goal."""
    return await _run("refocus", refocus(payload.concepts, payload.goal))


@router.post("/validate-links", response_model=OperationResponse, response_model_exclude_none=True)
async def validate_links_endpoint(payload: ConceptListRequest):
    """Score and correct parent relationships."""
    return await _run("validate_links", validate_links(payload.concepts))


@router.post("/trace-path", response_model=OperationResponse, response_model_exclude_none=True)
async def trace_path_endpoint(payload: TracePathRequest):
    """Generate an ordered learning path from start to end."""
    return await _run("trace_path", trace_path(payload.start, payload.end))


@router.post("/derive-summary", response_model=OperationResponse, response_model_exclude_none=True)
async def derive_summary_endpoint(payload: ConceptListRequest):
    """Summarize a layer of concepts into at most two concepts."""
    return await _run("derive_summary", derive_summary(payload.concepts))


@router.post("/progressive-expand", response_model=OperationResponse, response_model_exclude_none=True)
async def progressive_expand_endpoint(payload: ProgressiveExpandRequest):
    """Generate the next layer of a progressive learning path."""
    return await _run("progressive_expand", progressive_expand(payload.concept, payload.previous_layers))
