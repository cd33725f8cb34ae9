"""
Learning Engine

Feedback loop over test outcomes: records them, folds failures into defect
patterns, retrains the action policy and reports per-element insights.
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..config import LearningConfig
from ..exploration.elements.models import ElementDescriptor
from .defect_patterns import DefectPatternAggregator
from .models import ActionRecommendation, OutcomeRecord
from .outcome_store import OutcomeStore
from .policy import ActionPolicy

logger = logging.getLogger(__name__)

FREQUENT_FAILURE_THRESHOLD = 5
ELEMENT_NOT_FOUND = 'Element not found'


@dataclass
class ElementInsight:
    """Success statistics and advice for one selector."""
    element: str
    success_rate: float  # percent
    suggestions: List[str] = field(default_factory=list)


class LearningEngine:
    """
    Owns the outcome store, the defect pattern aggregator and the action policy.

    Persisted state is loaded at construction. The model loads in the
    background; until it is ready recommendations use the default heuristic.
    """

    def __init__(self, config: Optional[LearningConfig] = None, load_model: bool = True):
        self.config = config or LearningConfig()
        self.store = OutcomeStore(self.config.outcomes_path)
        self.aggregator = DefectPatternAggregator(self.config.patterns_path)
        self.policy = ActionPolicy(self.config, store=self.store)
        self.model_loading: Optional[Future] = self.policy.load_async() if load_model else None

    def analyze_results(self, outcomes: Iterable[OutcomeRecord]) -> Future:
        """
        Ingest new outcomes.

        Records them, aggregates the failures, saves the defect patterns and
        schedules retraining of the action policy.

        Returns:
            Future of the background training run
        """
        self.store.record(outcomes)
        self.aggregator.aggregate(self.store.drain())
        self.aggregator.save()
        return self.policy.train()

    def recommend(self, element: ElementDescriptor) -> ActionRecommendation:
        return self.policy.recommend(element)

    def get_insights(self) -> List[ElementInsight]:
        """Success rate and suggestions for every selector in the history."""
        stats: Dict[str, List[int]] = {}
        for record in self.store.history:
            success, total = stats.setdefault(record.selector, [0, 0])
            stats[record.selector] = [success + int(record.success), total + 1]

        insights = []
        for selector, (success, total) in stats.items():
            suggestions = []
            pattern = self.aggregator.get(selector)
            if pattern is not None:
                if pattern.frequency > FREQUENT_FAILURE_THRESHOLD:
                    suggestions.append('Update selector or fix element interaction.')
                if ELEMENT_NOT_FOUND in pattern.common_errors:
                    suggestions.append('Add retry logic or improve selector.')
            insights.append(ElementInsight(selector, success / total * 100, suggestions))

        return insights

    def close(self) -> None:
        self.policy.shutdown()
