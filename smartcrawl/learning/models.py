"""
Learning Models

Records exchanged with the test runner and persisted between runs.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from dataclasses_json import dataclass_json, LetterCase, config


class ActionType(str, Enum):
    """Steps a generated test case can perform against an element."""

    CLICK = "click"
    VALIDATE = "validate"
    FILL = "fill"
    HOVER = "hover"
    TYPE = "type"
    CLEAR = "clear"
    DOUBLE_CLICK = "doubleClick"
    VERIFY_NAVIGATION = "verifyNavigation"


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class OutcomeRecord:
    """Result of one automated interaction. Never mutated once created."""
    success: bool
    selector: str = field(metadata=config(field_name='elementSelector'))
    action: str
    error_message: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class DefectPattern:
    """Aggregated failure statistics for one selector.

    ``frequency`` only increases and ``common_errors`` only gains new,
    distinct messages, in first-seen order.
    """
    selector: str = field(metadata=config(field_name='elementSelector'))
    common_errors: List[str] = field(default_factory=list)
    frequency: int = 1

    def add_error(self, message: Optional[str]) -> None:
        if message and message not in self.common_errors:
            self.common_errors.append(message)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class ActionStep:
    """One step of an action recommendation."""
    action_type: ActionType = field(metadata=config(field_name='type'))
    target_selector: str = field(metadata=config(field_name='element'))


ActionRecommendation = List[ActionStep]
