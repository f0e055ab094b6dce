"""
Shared plumbing for concept operations: input coercion, the LLM round trip,
output validation and per-call logging.
"""
import functools
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from errors import ConceptGraphError, InputValidationError, OutputValidationError
from models import Concept
from services_concept_validation import (
    normalize_concept,
    validate_concept,
    validate_concept_array,
)
from services_json_extraction import extract_json_array
from services_llm import LLMRequest, call_llm
from services_logging import log_operation_event

logger = logging.getLogger("kflow")


def coerce_concept(value: Any, operation: str, label: str = "concept") -> Concept:
    """Validate a caller-supplied concept and return an independent copy."""
    if not validate_concept(value):
        raise InputValidationError(f"Invalid {label} input for {operation} operation")
    return normalize_concept(value)


def coerce_concept_list(
    values: Any,
    operation: str,
    label: str = "concepts",
    allow_empty: bool = False,
) -> List[Concept]:
    if isinstance(values, tuple):
        values = list(values)
    if not validate_concept_array(values) or (not values and not allow_empty):
        raise InputValidationError(f"Invalid {label} input for {operation} operation")
    return [normalize_concept(v) for v in values]


def append_unique(items: List[str], value: str) -> List[str]:
    return list(items) if value in items else [*items, value]


async def request_concepts(
    operation: str,
    system_prompt: str,
    user_prompt: str,
    temperature: Optional[float] = None,
) -> List[Any]:
    """Call the LLM and return the raw (unvalidated) JSON array from its reply."""
    response = await call_llm(
        LLMRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            task_type=operation,
            temperature=temperature,
        )
    )
    return extract_json_array(response.content)


def ensure_valid(
    operation: str,
    concepts: List[Concept],
    validator: Callable[[Any], bool] = validate_concept,
) -> List[Concept]:
    for concept in concepts:
        if not validator(concept):
            raise OutputValidationError(operation, concept.name)
    return concepts


def _collect_names(values: Iterable[Any]) -> List[str]:
    names: List[str] = []
    for value in values:
        if isinstance(value, (list, tuple)):
            names.extend(_collect_names(value))
        elif isinstance(value, Concept):
            names.append(value.name)
        elif isinstance(value, dict) and isinstance(value.get("name"), str):
            names.append(value["name"])
    return names


def _scalar_arguments(signature: inspect.Signature, args: tuple, kwargs: dict) -> Optional[Dict[str, Any]]:
    """Plain string/number arguments of a call (diversity, goal, ...), by parameter name."""
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        # The call itself raises the same TypeError
        return None
    bound.apply_defaults()
    scalars = {
        name: value
        for name, value in bound.arguments.items()
        if isinstance(value, (str, int, float)) and not isinstance(value, bool)
    }
    return scalars or None


def concept_operation(operation: str):
    """Log, time and record every call of a concept operation; errors are re-raised."""

    def decorator(func: Callable[..., Awaitable[List[Concept]]]):
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> List[Concept]:
            input_names = _collect_names([*args, *kwargs.values()])
            metadata = _scalar_arguments(signature, args, kwargs)
            logger.info(f"[operations] {operation} started (inputs={input_names})")
            started = time.perf_counter()
            try:
                results = await func(*args, **kwargs)
            except ConceptGraphError as e:
                duration_ms = (time.perf_counter() - started) * 1000
                logger.error(f"[operations] {operation} failed: {e}")
                log_operation_event(
                    operation,
                    input_names,
                    status="error",
                    duration_ms=duration_ms,
                    error=f"{type(e).__name__}: {e}",
                    metadata=metadata,
                )
                raise

            duration_ms = (time.perf_counter() - started) * 1000
            result_names = [c.name for c in results]
            logger.info(f"[operations] {operation} returned {len(results)} concepts in {duration_ms:.0f}ms")
            log_operation_event(
                operation,
                input_names,
                status="ok",
                result_names=result_names,
                duration_ms=duration_ms,
                metadata=metadata,
            )
            return results

        return wrapper

    return decorator
