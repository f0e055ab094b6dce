"""
Concept graph operations.

Every operation takes one concept or a list of concepts (Concept models or
plain dicts), asks the LLM for new concepts or relationships, and returns a new
list of concepts ready to be merged into a graph. Inputs are never mutated.
"""
from .derive_parents import derive_parents
from .derive_summary import derive_summary
from .expand import expand
from .expand_list import expand_list
from .explore import explore
from .progressive_expand import progressive_expand
from .refocus import refocus
from .synthesize import synthesize
from .trace_path import trace_path
from .validate_links import validate_links

__all__ = [
    "derive_parents",
    "derive_summary",
    "expand",
    "expand_list",
    "explore",
    "progressive_expand",
    "refocus",
    "synthesize",
    "trace_path",
    "validate_links",
]
