"""
In-memory concept graph helpers.

A graph is a plain name-keyed dict of concepts, threaded explicitly through
calls and replaced, never modified, on every merge. GraphStore wraps one graph
for callers that grow it from several concurrent operations.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional, Union

from errors import GraphCycleError
from models import Concept, ConceptGraph
from services_merge import merge_into_graph

logger = logging.getLogger("kflow")

_VISITING = 1
_DONE = 2


def create_graph() -> ConceptGraph:
    return {}


def add_concepts_to_graph(graph: ConceptGraph, concepts: Iterable[Concept]) -> ConceptGraph:
    return merge_into_graph(graph, concepts)


def get_concept(graph: ConceptGraph, name: str) -> Optional[Concept]:
    return graph.get(name)


def get_all_concepts(graph: ConceptGraph) -> List[Concept]:
    return list(graph.values())


def _in_graph_parents(graph: ConceptGraph, concept: Concept) -> List[str]:
    return [p for p in concept.parents if p in graph]


def _walk_parents_first(
    graph: ConceptGraph,
    on_cycle: Callable[[List[str]], None],
) -> List[Concept]:
    # Iterative DFS over parent links so long chains don't hit the recursion limit.
    state = {}
    ordered: List[Concept] = []

    for root in graph.values():
        if root.name in state:
            continue

        state[root.name] = _VISITING
        path = [root.name]
        stack = [(root, iter(_in_graph_parents(graph, root)))]

        while stack:
            concept, parents = stack[-1]
            descended = False
            for parent_name in parents:
                parent_state = state.get(parent_name)
                if parent_state is None:
                    parent = graph[parent_name]
                    state[parent_name] = _VISITING
                    path.append(parent_name)
                    stack.append((parent, iter(_in_graph_parents(graph, parent))))
                    descended = True
                    break
                if parent_state == _VISITING:
                    on_cycle(path[path.index(parent_name):] + [parent_name])

            if not descended:
                stack.pop()
                path.pop()
                state[concept.name] = _DONE
                ordered.append(concept)

    return ordered


def find_cycle(graph: ConceptGraph) -> Optional[List[str]]:
    """Return the first parent cycle found (child -> parent order), or None."""
    cycles: List[List[str]] = []
    _walk_parents_first(graph, cycles.append)
    return cycles[0] if cycles else None


def build_hierarchy(graph: ConceptGraph, strict: bool = True) -> List[Concept]:
    """
    Order every concept after all of its in-graph parents.

    Parents that are not in the graph are ignored. A parent cycle has no valid
    order: with strict=True it raises GraphCycleError, otherwise the closing
    link is skipped and a warning is logged.
    """

    def on_cycle(cycle: List[str]) -> None:
        if strict:
            raise GraphCycleError(cycle)
        logger.warning(f"[graph] ignoring parent link that closes cycle: {' -> '.join(cycle)}")

    return _walk_parents_first(graph, on_cycle)


def export_graph_json(concepts: Iterable[Concept], path: Union[str, Path]) -> Path:
    """Write concepts to path as an indented JSON array and return the path."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = [c.model_dump(exclude_none=True) for c in concepts]
    target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"[graph] exported {len(payload)} concepts to {target}")
    return target


class GraphStore:
    """
    Single owner of a growing concept graph.

    Operations may run concurrently, but their results are folded in one at a
    time through apply(), so overlapping names never race.
    """

    def __init__(self, graph: Optional[ConceptGraph] = None) -> None:
        self._graph: ConceptGraph = dict(graph or {})
        self._lock = asyncio.Lock()
        self.version = 0

    def snapshot(self) -> ConceptGraph:
        return dict(self._graph)

    def __len__(self) -> int:
        return len(self._graph)

    async def apply(self, concepts: Iterable[Concept]) -> ConceptGraph:
        async with self._lock:
            self._graph = merge_into_graph(self._graph, concepts)
            self.version += 1
            return dict(self._graph)

    async def grow(self, operation: Callable[..., Awaitable[List[Concept]]], *args, **kwargs) -> List[Concept]:
        """Run an operation and merge its result; returns the operation's result."""
        results = await operation(*args, **kwargs)
        await self.apply(results)
        return results
