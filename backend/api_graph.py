"""
Stateless graph endpoints: merge operation results into a graph and order a
graph parents-first. The caller owns the graph and sends it with each request.
"""
import logging

from fastapi import APIRouter

from models import ConceptListRequest, GraphMergeRequest, GraphResponse
from services_concept_graph import build_hierarchy, create_graph, get_all_concepts
from services_merge import merge_into_graph

logger = logging.getLogger("kflow")

router = APIRouter(prefix="/graph", tags=["graph"])


@router.post("/merge", response_model=GraphResponse, response_model_exclude_none=True)
def merge_graph(payload: GraphMergeRequest):
    """
    Fold new concepts into an existing graph.

    Concepts sharing a name are merged: relationship lists are unioned and the
    first non-empty description is kept.
    """
    graph = merge_into_graph(create_graph(), payload.graph)
    merged = merge_into_graph(graph, payload.concepts)
    logger.info(f"[graph] merged {len(payload.concepts)} concepts into graph of {len(graph)} -> {len(merged)}")
    concepts = get_all_concepts(merged)
    return GraphResponse(concepts=[c.model_dump() for c in concepts], total=len(concepts))


@router.post("/hierarchy", response_model=GraphResponse, response_model_exclude_none=True)
def graph_hierarchy(payload: ConceptListRequest):
    """Order concepts so every parent precedes its children. A cycle yields 409."""
    graph = merge_into_graph(create_graph(), payload.concepts)
    ordered = build_hierarchy(graph)
    return GraphResponse(concepts=[c.model_dump() for c in ordered], total=len(ordered))
