"""
Non-destructive merge of concepts into a name-keyed graph.

Merging never drops data: relationship lists are unioned, the first non-empty
description wins, and the graph mapping passed in is never modified.
"""
from typing import Iterable, List, Optional

from models import Concept, ConceptGraph, ExtendedConcept

_SCORE_FIELDS = ("attention_score", "validation_score", "importance")


def union_lists(first: Iterable[str], second: Iterable[str]) -> List[str]:
    """Order-preserving union: entries of first, then unseen entries of second."""
    seen = set()
    merged: List[str] = []
    for item in [*first, *second]:
        if item not in seen:
            seen.add(item)
            merged.append(item)
    return merged


def _prefer_incoming(existing: Concept, incoming: Concept, field: str) -> Optional[object]:
    value = getattr(incoming, field, None)
    return value if value is not None else getattr(existing, field, None)


def merge_concepts(existing: Concept, incoming: Concept) -> Concept:
    """
    Merge two concepts that share a name.

    - parents/children: union, existing entries first
    - description: existing unless empty, then incoming
    - layer (and score fields): incoming when set, else existing
    """
    if existing.name != incoming.name:
        raise ValueError(f"Cannot merge concepts with different names: {existing.name} vs {incoming.name}")

    merged = {
        "name": existing.name,
        "description": existing.description or incoming.description,
        "parents": union_lists(existing.parents, incoming.parents),
        "children": union_lists(existing.children, incoming.children),
        "layer": _prefer_incoming(existing, incoming, "layer"),
    }

    if isinstance(existing, ExtendedConcept) or isinstance(incoming, ExtendedConcept):
        for field in _SCORE_FIELDS:
            merged[field] = _prefer_incoming(existing, incoming, field)
        return ExtendedConcept(**merged)

    return Concept(**merged)


def merge_into_graph(graph: ConceptGraph, concepts: Iterable[Concept]) -> ConceptGraph:
    """Return a new graph with concepts folded in; the input mapping is left untouched."""
    new_graph = dict(graph)

    for concept in concepts:
        existing = new_graph.get(concept.name)
        if existing is not None:
            new_graph[concept.name] = merge_concepts(existing, concept)
        else:
            new_graph[concept.name] = concept.model_copy(deep=True)

    return new_graph
