from typing import Any, Dict, List

from errors import InputValidationError
from models import Concept
from prompts_concepts import EXPLORE_SYSTEM_PROMPT
from services_concept_validation import concept_names, normalize_concept
from services_llm import TASK_EXPLORE
from services_merge import union_lists

from ._common import coerce_concept, concept_operation, ensure_valid, request_concepts

# Higher diversity samples at a higher temperature.
DIVERSITY_TEMPERATURES: Dict[str, float] = {
    "low": 0.6,
    "medium": 0.7,
    "high": 0.8,
}


@concept_operation(TASK_EXPLORE)
async def explore(concept: Any, diversity: str = "high") -> List[Concept]:
    """
    Generate lateral concepts related to a concept.

    The new concepts are siblings: each takes the input concept's parents as its
    own. For every one of those parents the result also carries a parent-update
    concept whose children list the input concept and the new siblings, so that
    merging the result wires the siblings into the existing parents.
    """
    source = coerce_concept(concept, TASK_EXPLORE)
    if diversity not in DIVERSITY_TEMPERATURES:
        raise InputValidationError(
            f"Invalid diversity {diversity!r} for explore operation; expected one of: low, medium, high"
        )

    user_prompt = (
        f'Generate 5-10 concepts related to "{source.name}" (Description: {source.description}), '
        f"including diverse ideas. Focus on {diversity} diversity: include varied and creative related concepts. "
        'Include only: "name", "description". "parents" and "children" should be empty arrays []. '
        "Return JSON array only."
    )

    items = await request_concepts(
        TASK_EXPLORE,
        EXPLORE_SYSTEM_PROMPT,
        user_prompt,
        temperature=DIVERSITY_TEMPERATURES[diversity],
    )

    # The input and its parents cannot be their own siblings
    taken = {source.name, *source.parents} - {""}
    siblings = []
    for item in items:
        normalized = normalize_concept(item)
        if normalized.name in taken:
            continue
        siblings.append(normalized.model_copy(update={"parents": list(source.parents)}))

    sibling_names = concept_names(siblings)
    parent_updates = [
        Concept(
            name=parent_name,
            description="",
            parents=[],
            children=union_lists([source.name], sibling_names),
        )
        for parent_name in source.parents
        if parent_name.strip()
    ]

    return ensure_valid(TASK_EXPLORE, siblings + parent_updates)
