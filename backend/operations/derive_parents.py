from typing import Any, List

from models import Concept
from prompts_concepts import DERIVE_PARENTS_SYSTEM_PROMPT
from services_concept_validation import normalize_concept
from services_llm import TASK_DERIVE_PARENTS

from ._common import (
    append_unique,
    coerce_concept,
    concept_operation,
    ensure_valid,
    request_concepts,
)


@concept_operation(TASK_DERIVE_PARENTS)
async def derive_parents(concept: Any) -> List[Concept]:
    """
    Generate 3-6 prerequisite concepts for a concept.

    Each prerequisite lists the input concept as a child. Their own parents are
    whatever the model supplied, usually none.
    """
    source = coerce_concept(concept, TASK_DERIVE_PARENTS)

    user_prompt = (
        f'For "{source.name}" (Description: {source.description}), generate 3-6 prerequisite or parent concepts. '
        f'Include only: "name", "description", "children" (array with "{source.name}"), '
        '"parents" (empty array []). Return JSON array only.'
    )

    items = await request_concepts(TASK_DERIVE_PARENTS, DERIVE_PARENTS_SYSTEM_PROMPT, user_prompt)

    results = []
    for item in items:
        normalized = normalize_concept(item)
        results.append(
            normalized.model_copy(update={"children": append_unique(normalized.children, source.name)})
        )

    return ensure_valid(TASK_DERIVE_PARENTS, results)
