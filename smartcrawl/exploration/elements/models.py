"""
Element Models

Data types describing discovered interactive elements.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from dataclasses_json import dataclass_json, LetterCase

from .selectors import canonical_key


class ElementKind(str, Enum):
    """Coarse UI role classification of an interactive element."""

    BUTTON = "button"
    INPUT = "input"
    LINK = "link"
    SELECT = "select"
    TEXTAREA = "textarea"


# Interactions a test can attempt against each kind of element.
INTERACTIONS: Dict[ElementKind, Tuple[str, ...]] = {
    ElementKind.BUTTON: ('click', 'hover', 'doubleClick'),
    ElementKind.INPUT: ('type', 'fill', 'clear'),
    ElementKind.TEXTAREA: ('type', 'fill', 'clear'),
    ElementKind.LINK: ('click', 'verifyNavigation'),
}


def detect_possible_interactions(kind: ElementKind) -> Tuple[str, ...]:
    """Return the interactions for *kind*, empty when the kind has none."""
    return INTERACTIONS.get(ElementKind(kind), ())


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class ElementDescriptor:
    """A discovered interactive element.

    Identity is the canonical key of ``(selector, kind)``; ``text`` is
    informational only.
    """

    selector: str
    kind: ElementKind
    attributes: Dict[str, str] = field(default_factory=dict)
    interactions: List[str] = field(default_factory=list)
    text: str = field(default='', compare=False)

    @property
    def key(self) -> str:
        return canonical_key(self.selector, self.kind, self.attributes)
