#!/usr/bin/env python3
"""
Operator-only script (NOT an API endpoint):
Grow a small concept graph from a single seed concept and export it as JSON.

Runs expand on the seed, explore on the first child, expand_list over the
children and synthesize over the first two children. Explore and expand_list
run concurrently; every result is merged through one GraphStore.

Requires OPENAI_API_KEY (see config.py for the .env lookup order).
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path
from typing import Iterable, List

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from errors import ConceptGraphError  # noqa: E402
from models import Concept  # noqa: E402
from operations import expand, expand_list, explore, synthesize  # noqa: E402
from services_concept_graph import GraphStore, build_hierarchy, export_graph_json  # noqa: E402


def render_hierarchy(concepts: Iterable[Concept]) -> str:
    lines: List[str] = []
    for concept in concepts:
        parents = f"  <- {', '.join(concept.parents)}" if concept.parents else ""
        lines.append(f"- {concept.name}{parents}")
    return "\n".join(lines)


async def grow_graph(seed: Concept) -> GraphStore:
    store = GraphStore()
    await store.apply([seed])

    children = await store.grow(expand, seed)
    print(f"expand: {len(children)} sub-concepts of {seed.name}")
    if not children:
        return store

    # Both see the seed's children as they are now; the store serializes the merges.
    explored, expanded = await asyncio.gather(
        store.grow(explore, children[0], "medium"),
        store.grow(expand_list, children),
    )
    print(f"explore: {len(explored)} concepts around {children[0].name}")
    print(f"expand_list: {len(expanded)} concepts")

    if len(children) >= 2:
        hybrids = await store.grow(synthesize, children[:2])
        print(f"synthesize: {len(hybrids)} hybrids of {children[0].name} + {children[1].name}")

    return store


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Grow a concept graph from a seed concept.")
    parser.add_argument("--seed", required=True, help="Name of the seed concept.")
    parser.add_argument("--description", default="", help="Optional description of the seed concept.")
    parser.add_argument("--output", default="concept_graph.json", help="Where to write the exported graph.")
    parser.add_argument("--allow-cycles", action="store_true", help="Skip cycle-closing links instead of failing.")
    args = parser.parse_args(list(argv) if argv is not None else None)

    seed = Concept(name=args.seed, description=args.description, layer=0)

    try:
        store = asyncio.run(grow_graph(seed))
        ordered = build_hierarchy(store.snapshot(), strict=not args.allow_cycles)
    except ConceptGraphError as e:
        print(f"Graph demo failed: {e}", file=sys.stderr)
        return 1

    print()
    print(render_hierarchy(ordered))
    output = export_graph_json(ordered, Path(args.output))
    print(f"\nExported {len(ordered)} concepts to {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
