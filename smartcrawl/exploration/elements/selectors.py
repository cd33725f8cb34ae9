"""
Selector Synthesis and Canonicalization

Builds stable selectors from element attributes and derives the canonical
identity used to de-duplicate discovered elements.

Selectors take one of two forms:

- ``attr=value`` for the first present identifying attribute, checked in the
  order of ``PRIORITY_ATTRIBUTES``. Backslashes and ``=`` inside the value are
  backslash-escaped, so the first unescaped ``=`` is always the separator.
- ``xpath=/html[1]/body[1]/.../tag[n]`` when no identifying attribute is
  present, where ``n`` is the 1-based position among same-tag siblings.
"""

import hashlib
import re
from typing import Dict, Iterable, List, Mapping, Optional, TypeVar

PRIORITY_ATTRIBUTES = ('data-testid', 'id', 'aria-label', 'name')

XPATH_PREFIX = 'xpath='

# Used when an element has neither identifying attributes nor a known path.
UNADDRESSABLE_SELECTOR = 'xpath=//*'

_WHITESPACE = re.compile(r'\s+')


def escape_value(value: str) -> str:
    """Escape the separator (and the escape character) inside a selector value."""
    return value.replace('\\', '\\\\').replace('=', '\\=')


def synthesize_selector(attributes: Mapping[str, str], structural_path: Optional[str] = None) -> str:
    """
    Generate a stable selector for an element.

    Args:
        attributes: Element attributes (name -> value)
        structural_path: Positional path of the element, used when no
            identifying attribute is present

    Returns:
        A non-empty selector string
    """
    for attr in PRIORITY_ATTRIBUTES:
        value = attributes.get(attr)
        if value:
            return f"{attr}={escape_value(value)}"

    if structural_path:
        return f"{XPATH_PREFIX}{structural_path}"
    return UNADDRESSABLE_SELECTOR


def canonicalize(selector: str) -> str:
    """
    Strip formatting noise from a selector.

    Whitespace runs collapse to a single space and surrounding whitespace is
    removed. For priority attribute selectors the attribute name is
    lower-cased and whitespace around the separator is dropped; xpath
    selectors lose all whitespace. Applying this twice yields the same result.
    """
    text = _WHITESPACE.sub(' ', selector).strip()

    attr, sep, value = text.partition('=')
    if not sep:
        return text

    attr = attr.strip().lower()
    if attr == XPATH_PREFIX[:-1]:
        return XPATH_PREFIX + value.replace(' ', '')
    if attr in PRIORITY_ATTRIBUTES:
        return f"{attr}={value.strip()}"
    return text


def generate_id(clean_selector: str, kind, attributes: Optional[Mapping[str, str]] = None) -> str:
    """
    Derive the stable id for an element.

    Only identifying attributes participate, so the id is unaffected by
    attribute order or by volatile attributes such as ``class`` or ``style``.
    """
    kind_name = getattr(kind, 'value', kind)
    identifying = sorted(
        (attr, attributes[attr])
        for attr in PRIORITY_ATTRIBUTES
        if attributes and attributes.get(attr)
    )
    material = '|'.join(
        [str(kind_name), clean_selector] + [f"{attr}={value}" for attr, value in identifying]
    )
    return hashlib.sha1(material.encode('utf-8')).hexdigest()[:16]


def canonical_key(selector: str, kind, attributes: Optional[Mapping[str, str]] = None) -> str:
    """Canonical de-duplication key for a selector of the given kind."""
    return generate_id(canonicalize(selector), kind, attributes)


T = TypeVar('T')


def deduplicate(elements: Iterable[T]) -> List[T]:
    """
    Drop elements whose canonical key was already seen, keeping the first.

    Elements must expose a ``key`` attribute (see ``ElementDescriptor``).
    """
    seen = set()
    unique_elements = []

    for element in elements:
        if element.key not in seen:
            seen.add(element.key)
            unique_elements.append(element)

    return unique_elements
