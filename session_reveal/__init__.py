"""Find, reveal and preview the file an agent session last referenced."""

from .resolver import ReferenceResolver
from .resolver import find_latest_reference
from .resolver import normalize_reference
from .utils.references import extract_references

__all__ = [
    "ReferenceResolver",
    "extract_references",
    "find_latest_reference",
    "normalize_reference",
]
