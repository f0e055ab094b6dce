from typing import Any, Dict, List

from models import Concept, ExtendedConcept
from prompts_concepts import VALIDATE_LINKS_SYSTEM_PROMPT
from services_concept_validation import clamp_score, normalize_concept, validate_extended_concept
from services_llm import TASK_VALIDATE_LINKS

from ._common import coerce_concept_list, concept_operation, ensure_valid, request_concepts


def _validated(item: Any, existing_by_name: Dict[str, Concept]) -> ExtendedConcept:
    reply = item if isinstance(item, dict) else {}
    normalized = normalize_concept(item)
    existing = existing_by_name.get(normalized.name)

    fields = normalized.model_dump()
    if existing is not None:
        fields["description"] = normalized.description or existing.description
        # A corrected parent list replaces the old one outright, so wrong links
        # can be removed. Only an omitted list falls back.
        if not isinstance(reply.get("parents"), list):
            fields["parents"] = list(existing.parents)
        if not isinstance(reply.get("children"), list):
            fields["children"] = list(existing.children)
        if fields["layer"] is None:
            fields["layer"] = existing.layer

    return ExtendedConcept(
        **fields,
        validation_score=clamp_score(reply.get("validation_score")),
    )


@concept_operation(TASK_VALIDATE_LINKS)
async def validate_links(concepts: Any) -> List[ExtendedConcept]:
    """
    Ask the model to check parent relationships among concepts.

    Returns extended concepts with validation_score set and parents corrected.
    This is the only operation whose result can remove a relationship.
    """
    sources = coerce_concept_list(concepts, TASK_VALIDATE_LINKS)

    concept_list = "; ".join(
        f"{c.name} (parents: {', '.join(c.parents) or 'none'})" for c in sources
    )
    user_prompt = (
        f"Validate relationships among: {concept_list}. For each concept, include only: "
        '"name", "validation_score" (number 0-1), "parents" (array of parent names, corrected if needed), '
        '"description" (preserve existing), "children" (preserve existing). Return JSON array only.'
    )

    items = await request_concepts(TASK_VALIDATE_LINKS, VALIDATE_LINKS_SYSTEM_PROMPT, user_prompt)

    existing_by_name = {c.name: c for c in sources}
    results = [_validated(item, existing_by_name) for item in items]

    return ensure_valid(TASK_VALIDATE_LINKS, results, validator=validate_extended_concept)
