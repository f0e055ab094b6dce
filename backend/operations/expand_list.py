from typing import Any, List

from models import Concept
from prompts_concepts import EXPAND_LIST_SYSTEM_PROMPT
from services_concept_validation import concept_names, normalize_concept
from services_llm import TASK_EXPAND_LIST

from ._common import (
    append_unique,
    coerce_concept_list,
    concept_operation,
    ensure_valid,
    request_concepts,
)


@concept_operation(TASK_EXPAND_LIST)
async def expand_list(parents: Any) -> List[Concept]:
    """Generate new concepts that each grow out of one or more of the given parents."""
    sources = coerce_concept_list(parents, TASK_EXPAND_LIST, label="parent concepts")
    parent_names = concept_names(sources)

    user_prompt = (
        f"Generate new concepts based on the following parent list: {', '.join(parent_names)}. "
        'For each concept, include only these exact fields: "name", "description", '
        '"parents" (array with one or more parent names from the parent list), "children" (empty array []). '
        "Return JSON array only, no extra fields or prose."
    )

    items = await request_concepts(TASK_EXPAND_LIST, EXPAND_LIST_SYSTEM_PROMPT, user_prompt)

    results = []
    for item in items:
        normalized = normalize_concept(item)
        # Anchor concepts that don't cite any listed parent to the first one
        if not any(p in parent_names for p in normalized.parents):
            normalized = normalized.model_copy(
                update={"parents": append_unique(normalized.parents, parent_names[0])}
            )
        results.append(normalized)

    return ensure_valid(TASK_EXPAND_LIST, results)
