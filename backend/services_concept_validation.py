"""
Schema checks and normalization for concepts.

Model output is untrusted: anything parsed from an LLM reply goes through
normalize_concept() and then validate_concept() before it is treated as a
Concept. The validators accept plain dicts as well as Concept models so they
can be run on raw request payloads.
"""
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from models import Concept

IMPORTANCE_LEVELS = ("low", "medium", "high")


def _as_mapping(obj: Any) -> Optional[Dict[str, Any]]:
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if isinstance(obj, dict):
        return obj
    return None


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def is_number(value: Any) -> bool:
    """True for real ints/floats; bools and NaN do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def validate_concept(obj: Any) -> bool:
    """Check that obj has a non-empty name, a string description and string-list links."""
    data = _as_mapping(obj)
    if data is None:
        return False

    name = data.get("name")
    if not isinstance(name, str) or len(name) == 0:
        return False

    if not isinstance(data.get("description"), str):
        return False

    if not _is_string_list(data.get("parents")):
        return False

    if not _is_string_list(data.get("children")):
        return False

    return True


def _score_in_range(value: Any) -> bool:
    return is_number(value) and 0 <= value <= 1


def validate_extended_concept(obj: Any) -> bool:
    """validate_concept() plus range/enum checks on whichever optional fields are present."""
    if not validate_concept(obj):
        return False

    data = _as_mapping(obj)

    attention_score = data.get("attention_score")
    if attention_score is not None and not _score_in_range(attention_score):
        return False

    validation_score = data.get("validation_score")
    if validation_score is not None and not _score_in_range(validation_score):
        return False

    importance = data.get("importance")
    if importance is not None and importance not in IMPORTANCE_LEVELS:
        return False

    return True


def validate_concept_array(concepts: Any) -> bool:
    return isinstance(concepts, list) and all(validate_concept(c) for c in concepts)


def _normalize_layer(value: Any) -> Optional[int]:
    if not is_number(value) or math.isinf(value):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    return value


def normalize_concept(raw: Any) -> Concept:
    """
    Coerce raw model output into the minimal Concept shape.

    Never raises. Missing or mistyped fields get defaults, non-string entries are
    dropped from parents/children. The result may still be invalid (empty name),
    so callers validate afterwards. Applying it twice gives the same result.
    """
    data = _as_mapping(raw) or {}

    name = data.get("name")
    description = data.get("description")
    parents = data.get("parents")
    children = data.get("children")

    return Concept(
        name=name if isinstance(name, str) else "",
        description=description if isinstance(description, str) else "",
        parents=[p for p in parents if isinstance(p, str)] if isinstance(parents, list) else [],
        children=[c for c in children if isinstance(c, str)] if isinstance(children, list) else [],
        layer=_normalize_layer(data.get("layer")),
    )


def clamp_score(value: Any) -> Optional[float]:
    """Clamp a score into [0, 1]; anything that is not a number becomes None."""
    if not is_number(value):
        return None
    return float(max(0.0, min(1.0, value)))


def normalize_importance(value: Any) -> Optional[str]:
    return value if value in IMPORTANCE_LEVELS else None


def concept_names(concepts: List[Concept]) -> List[str]:
    return [c.name for c in concepts]
