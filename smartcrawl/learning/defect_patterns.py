"""
Defect Pattern Aggregation

Per-selector failure statistics derived from outcome records, persisted
as a JSON list between runs.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .models import DefectPattern, OutcomeRecord

logger = logging.getLogger(__name__)


class DefectPatternAggregator:
    """
    Maintains one DefectPattern per failing selector.

    ``aggregate`` must be fed each record once: re-submitting records that
    were already aggregated counts their failures again.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._patterns: Dict[str, DefectPattern] = {}

        if self.path is not None:
            self.load()

    @property
    def patterns(self) -> List[DefectPattern]:
        """Patterns in the order their selectors first failed."""
        return list(self._patterns.values())

    def get(self, selector: str) -> Optional[DefectPattern]:
        return self._patterns.get(selector)

    def aggregate(self, records: Iterable[OutcomeRecord]) -> List[DefectPattern]:
        """
        Fold new outcome records into the patterns.

        Args:
            records: Records not previously aggregated; successes are ignored

        Returns:
            Patterns touched by this call
        """
        touched: Dict[str, DefectPattern] = {}

        for record in records:
            if record.success:
                continue

            pattern = self._patterns.get(record.selector)
            if pattern is None:
                pattern = DefectPattern(selector=record.selector, frequency=1)
                self._patterns[record.selector] = pattern
            else:
                pattern.frequency += 1
            pattern.add_error(record.error_message)
            touched[record.selector] = pattern

        if touched:
            logger.info(f"🐛 Updated defect patterns for {len(touched)} selector(s)")
        return list(touched.values())

    def load(self) -> None:
        """Load patterns from disk; any failure leaves an empty pattern list."""
        self._patterns = {}
        if not self.path.exists():
            logger.info(f"No defect patterns at {self.path}, starting empty")
            return

        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
            patterns = [DefectPattern.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Could not load defect patterns from {self.path}: {e}")
            return

        for pattern in patterns:
            self._patterns[pattern.selector] = pattern
        logger.info(f"Loaded {len(self._patterns)} defect pattern(s) from {self.path}")

    def save(self) -> bool:
        """Write patterns to disk. Returns False (and logs) on failure."""
        if self.path is None:
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = [pattern.to_dict() for pattern in self._patterns.values()]
            self.path.write_text(json.dumps(payload, indent=2), encoding='utf-8')
            return True
        except OSError as e:
            logger.warning(f"Could not save defect patterns to {self.path}: {e}")
            return False
