"""
Element discovery: models, selector synthesis and extraction.
"""

from .models import ElementDescriptor, ElementKind, INTERACTIONS, detect_possible_interactions
from .selectors import (
    PRIORITY_ATTRIBUTES, synthesize_selector, canonicalize,
    generate_id, canonical_key, deduplicate
)
from .extraction import ElementDiscoverer, KIND_SELECTORS

__all__ = [
    'ElementDescriptor', 'ElementKind', 'INTERACTIONS', 'detect_possible_interactions',
    'PRIORITY_ATTRIBUTES', 'synthesize_selector', 'canonicalize',
    'generate_id', 'canonical_key', 'deduplicate',
    'ElementDiscoverer', 'KIND_SELECTORS'
]
