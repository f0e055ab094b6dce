from typing import Any, List

from models import Concept
from prompts_concepts import PROGRESSIVE_EXPAND_SYSTEM_PROMPT
from services_concept_validation import concept_names, normalize_concept
from services_llm import TASK_PROGRESSIVE_EXPAND
from services_merge import union_lists

from ._common import (
    append_unique,
    coerce_concept,
    coerce_concept_list,
    concept_operation,
    ensure_valid,
    request_concepts,
)


def next_layer_number(previous_layers: List[Concept]) -> int:
    return max((c.layer or 0 for c in previous_layers), default=0) + 1


def _build_prompt(target: Concept, previous_layers: List[Concept]) -> str:
    if previous_layers:
        known = "\n".join(f"- {c.name}: {c.description}" for c in previous_layers)
    else:
        known = "(No previous concepts - this is the first layer)"

    return f"""You are a learning architect building a progressive learning path for the topic "{target.name}".

## Current Knowledge
Below is the list of concepts the learner already understands:
{known}

## Task
Now generate the **next layer of concepts** the learner should learn **immediately after** the current ones. Ensure each concept builds on what came before and increases slightly in complexity and abstraction.

## Rules
- The learner starts from no prior knowledge if this is the first layer.
- Each new layer should expand upon previous concepts, introduce only the next logical topics, and keep a smooth difficulty gradient.
- Avoid repeating concepts from previous layers.
- Each new concept must have at least one parent from the previous layer (if previous layer exists).
- Return the output **only as a JSON array** with the following minimal fields:
  - "name": concept name
  - "description": short explanation (1-2 sentences)
  - "parents": array of concept names from the previous layer that lead to this one (or empty array if first layer)
  - "children": empty array []

## Example
If concept = "Machine Learning" and previous layer = ["Data", "Algorithms"], the next layer might include:
[
  {{"name": "Supervised Learning", "description": "Training models on labeled data.", "parents": ["Data", "Algorithms"], "children": []}},
  {{"name": "Unsupervised Learning", "description": "Finding patterns without labels.", "parents": ["Data", "Algorithms"], "children": []}}
]

Return **only** the JSON array for the next layer."""


@concept_operation(TASK_PROGRESSIVE_EXPAND)
async def progressive_expand(concept: Any, previous_layers: Any) -> List[Concept]:
    """
    Generate the next layer of a progressive learning path.

    New concepts get layer = max(previous layer) + 1 and, when previous layers
    exist, at least one parent from them. The result also contains updated
    copies of the previous-layer concepts that gained children.
    """
    target = coerce_concept(concept, TASK_PROGRESSIVE_EXPAND)
    previous = coerce_concept_list(
        previous_layers, TASK_PROGRESSIVE_EXPAND, label="previous layers", allow_empty=True
    )

    layer = next_layer_number(previous)
    previous_names = concept_names(previous)

    items = await request_concepts(
        TASK_PROGRESSIVE_EXPAND, PROGRESSIVE_EXPAND_SYSTEM_PROMPT, _build_prompt(target, previous)
    )

    results = []
    for item in items:
        normalized = normalize_concept(item)
        parents = normalized.parents
        if previous_names and not any(p in previous_names for p in parents):
            parents = append_unique(parents, previous_names[0])
        results.append(normalized.model_copy(update={"parents": parents, "layer": layer}))

    ensure_valid(TASK_PROGRESSIVE_EXPAND, results)

    updated_parents = []
    for parent in previous:
        new_children = [c.name for c in results if parent.name in c.parents]
        if new_children:
            updated_parents.append(
                parent.model_copy(update={"children": union_lists(parent.children, new_children)})
            )

    return results + updated_parents
