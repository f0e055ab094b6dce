from typing import Any, List

from models import Concept
from prompts_concepts import TRACE_PATH_SYSTEM_PROMPT
from services_concept_validation import normalize_concept
from services_llm import TASK_TRACE_PATH

from ._common import (
    append_unique,
    coerce_concept,
    concept_operation,
    ensure_valid,
    request_concepts,
)


@concept_operation(TASK_TRACE_PATH)
async def trace_path(start: Any, end: Any) -> List[Concept]:
    """
    Generate an ordered learning path from start to end.

    Each step's parents include the step before it (the first step hangs off
    start), and the path always finishes with the end concept.
    """
    start_concept = coerce_concept(start, TASK_TRACE_PATH, label="start concept")
    end_concept = coerce_concept(end, TASK_TRACE_PATH, label="end concept")

    if start_concept.name == end_concept.name:
        return [start_concept]

    user_prompt = (
        f'Generate an ordered learning path from "{start_concept.name}" to "{end_concept.name}". '
        'Include only: "name" for each concept in the path. Include "description", "parents", and '
        '"children" as empty/appropriate arrays. Return JSON array only. Keep nodes in path order.'
    )

    items = await request_concepts(TASK_TRACE_PATH, TRACE_PATH_SYSTEM_PROMPT, user_prompt)

    steps = [normalize_concept(item) for item in items]
    # start is the anchor, not a step; chaining it to itself would be a cycle
    while steps and steps[0].name == start_concept.name:
        steps.pop(0)
    # Anything after the first mention of end is not on the path
    for index, step in enumerate(steps):
        if step.name == end_concept.name:
            steps = steps[: index + 1]
            break

    path: List[Concept] = []
    previous_name = start_concept.name
    for step in steps:
        path.append(step.model_copy(update={"parents": append_unique(step.parents, previous_name)}))
        previous_name = step.name or start_concept.name

    if not path or path[-1].name != end_concept.name:
        path.append(
            end_concept.model_copy(update={"parents": append_unique(end_concept.parents, previous_name)})
        )

    return ensure_valid(TASK_TRACE_PATH, path)
