from typing import Any, List

from models import Concept
from prompts_concepts import DERIVE_SUMMARY_SYSTEM_PROMPT
from services_concept_validation import concept_names, normalize_concept
from services_llm import TASK_DERIVE_SUMMARY

from ._common import coerce_concept_list, concept_operation, ensure_valid, request_concepts

MAX_SUMMARY_CONCEPTS = 2


@concept_operation(TASK_DERIVE_SUMMARY)
async def derive_summary(concepts: Any) -> List[Concept]:
    """Condense a layer of concepts into at most two summary concepts."""
    layer = coerce_concept_list(concepts, TASK_DERIVE_SUMMARY)
    layer_names = concept_names(layer)

    layer_concepts = "; ".join(f"{c.name}: {c.description}" for c in layer)
    user_prompt = (
        f"Given these layer concepts: {layer_concepts}, generate 1-2 summary nodes. "
        'Include only: "name", "description", "parents" (array of representative concepts from the layer), '
        '"children" (empty array []). Return JSON array only.'
    )

    items = await request_concepts(TASK_DERIVE_SUMMARY, DERIVE_SUMMARY_SYSTEM_PROMPT, user_prompt)

    results = []
    for item in items[:MAX_SUMMARY_CONCEPTS]:
        normalized = normalize_concept(item)
        # Summaries may only point at layer concepts; none left means all of them
        parents = [p for p in normalized.parents if p in layer_names] or list(layer_names)
        results.append(normalized.model_copy(update={"parents": parents, "children": []}))

    return ensure_valid(TASK_DERIVE_SUMMARY, results)
