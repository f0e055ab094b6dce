from typing import Any, Dict, List

from errors import InputValidationError
from models import Concept, ExtendedConcept
from prompts_concepts import REFOCUS_SYSTEM_PROMPT
from services_concept_validation import (
    clamp_score,
    normalize_concept,
    normalize_importance,
    validate_extended_concept,
)
from services_llm import TASK_REFOCUS
from services_merge import union_lists

from ._common import coerce_concept_list, concept_operation, ensure_valid, request_concepts


def _reply_fields(item: Any) -> Dict[str, Any]:
    return item if isinstance(item, dict) else {}


def _refocused(item: Any, existing_by_name: Dict[str, Concept]) -> ExtendedConcept:
    reply = _reply_fields(item)
    normalized = normalize_concept(item)
    existing = existing_by_name.get(normalized.name)

    fields = normalized.model_dump()
    if existing is not None:
        # The model only has to return name + scores; everything else falls
        # back to the concept we sent, and links are only ever added.
        fields["description"] = normalized.description or existing.description
        fields["parents"] = union_lists(existing.parents, normalized.parents)
        fields["children"] = union_lists(existing.children, normalized.children)
        if fields["layer"] is None:
            fields["layer"] = existing.layer

    return ExtendedConcept(
        **fields,
        attention_score=clamp_score(reply.get("attention_score")),
        validation_score=clamp_score(reply.get("validation_score")),
        importance=normalize_importance(reply.get("importance")),
    )


@concept_operation(TASK_REFOCUS)
async def refocus(concepts: Any, goal: str) -> List[ExtendedConcept]:
    """
    Score concepts for relevance to a learning goal.

    Returns extended concepts with attention_score/importance set. Concept data
    the model leaves out is taken from the matching input concept.
    """
    sources = coerce_concept_list(concepts, TASK_REFOCUS)
    if not isinstance(goal, str) or not goal.strip():
        raise InputValidationError("Goal is required for refocus operation")

    concept_list = "; ".join(f"{c.name}: {c.description}" for c in sources)
    user_prompt = (
        f'Given concepts: {concept_list} and goal: "{goal.strip()}", update attention. '
        'Include only: "name", "attention_score" (number 0-1), "importance" ("low", "medium", or "high"), '
        '"description" (preserve existing), "parents" (preserve existing), "children" (preserve existing). '
        "Return JSON array only."
    )

    items = await request_concepts(TASK_REFOCUS, REFOCUS_SYSTEM_PROMPT, user_prompt)

    existing_by_name = {c.name: c for c in sources}
    results = [_refocused(item, existing_by_name) for item in items]

    return ensure_valid(TASK_REFOCUS, results, validator=validate_extended_concept)
