from typing import Any, List

from models import Concept
from prompts_concepts import EXPAND_SYSTEM_PROMPT
from services_concept_validation import normalize_concept
from services_llm import TASK_EXPAND

from ._common import (
    append_unique,
    coerce_concept,
    concept_operation,
    ensure_valid,
    request_concepts,
)


@concept_operation(TASK_EXPAND)
async def expand(concept: Any) -> List[Concept]:
    """
    Generate 3-7 new sub-concepts of a concept.

    Every result lists the input concept as a parent and starts with no children.
    """
    source = coerce_concept(concept, TASK_EXPAND)

    parents_info = f"Parent concepts: {', '.join(source.parents)}. " if source.parents else ""
    children_info = (
        f"Existing child concepts (do NOT generate these again): {', '.join(source.children)}. "
        if source.children
        else ""
    )
    user_prompt = (
        f'Generate 3-7 foundational NEW sub-concepts of "{source.name}" (Description: {source.description}). '
        f"{parents_info}{children_info}"
        'For each NEW sub-concept, include only these exact fields: "name" (concept name), '
        '"description" (short explanation), '
        f'"parents" (array containing "{source.name}"), "children" (empty array []). '
        "Do NOT generate concepts that already exist in the children list. "
        "Return JSON array only, no text, no extra fields."
    )

    items = await request_concepts(TASK_EXPAND, EXPAND_SYSTEM_PROMPT, user_prompt)

    results = []
    for item in items:
        normalized = normalize_concept(item)
        results.append(
            normalized.model_copy(
                update={
                    "parents": append_unique(normalized.parents, source.name),
                    "children": [],
                }
            )
        )

    return ensure_valid(TASK_EXPAND, results)
