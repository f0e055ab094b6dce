from typing import Any, List

from models import Concept
from prompts_concepts import SYNTHESIZE_SYSTEM_PROMPT
from services_concept_validation import concept_names, normalize_concept
from services_llm import TASK_SYNTHESIZE
from services_merge import union_lists

from ._common import coerce_concept_list, concept_operation, ensure_valid, request_concepts


@concept_operation(TASK_SYNTHESIZE)
async def synthesize(parents: Any) -> List[Concept]:
    """Generate hybrid concepts; every result has all input concepts as parents."""
    sources = coerce_concept_list(parents, TASK_SYNTHESIZE, label="parent concepts")
    parent_names = concept_names(sources)

    user_prompt = (
        f"Generate hybrid concepts combining these parents: {', '.join(parent_names)}. "
        'For each concept, include only: "name", "description", '
        '"parents" (array containing all input parent names), "children" (empty array []). '
        "Return as a JSON array only."
    )

    items = await request_concepts(TASK_SYNTHESIZE, SYNTHESIZE_SYSTEM_PROMPT, user_prompt)

    results = []
    for item in items:
        normalized = normalize_concept(item)
        results.append(
            normalized.model_copy(update={"parents": union_lists(normalized.parents, parent_names)})
        )

    return ensure_valid(TASK_SYNTHESIZE, results)
