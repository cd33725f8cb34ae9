"""
Outcome Store

Append-only history of interaction outcomes, persisted as JSON Lines so
that it survives process restarts.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

from .models import OutcomeRecord

logger = logging.getLogger(__name__)


def parse_outcomes(payload: Union[str, Sequence[Any]]) -> List[OutcomeRecord]:
    """
    Parse outcome records from a JSON array, JSON Lines text, or decoded objects.

    Raises:
        ValueError: If the payload is not valid JSON or a record is malformed
    """
    if isinstance(payload, str):
        text = payload.strip()
        if not text:
            return []
        if text.startswith('['):
            items = json.loads(text)
        else:
            items = [json.loads(line) for line in text.splitlines() if line.strip()]
    else:
        items = list(payload)

    records = []
    for item in items:
        try:
            records.append(item if isinstance(item, OutcomeRecord) else OutcomeRecord.from_dict(item))
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed outcome record {item!r}: {e}") from e
    return records


class OutcomeStore:
    """
    Append-only outcome history.

    Records loaded from disk at start-up count as already aggregated; only
    records added through ``record()`` are returned by ``drain()``.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._history: List[OutcomeRecord] = []
        self._aggregated = 0

        if self.path is not None:
            self._load()
            self._aggregated = len(self._history)

    @property
    def history(self) -> List[OutcomeRecord]:
        return list(self._history)

    def __len__(self) -> int:
        return len(self._history)

    def record(self, outcomes: Iterable[OutcomeRecord]) -> List[OutcomeRecord]:
        """Append outcomes to the history and persist them."""
        new_records = list(outcomes)
        self._history.extend(new_records)
        self._append_to_disk(new_records)
        logger.info(f"📝 Recorded {len(new_records)} outcome(s); history size {len(self._history)}")
        return new_records

    def drain(self) -> List[OutcomeRecord]:
        """Return records added since the previous drain and advance past them."""
        pending = self._history[self._aggregated:]
        self._aggregated = len(self._history)
        return pending

    def for_selector(self, selector: str) -> List[OutcomeRecord]:
        return [r for r in self._history if r.selector == selector]

    def _load(self) -> None:
        """Load history from the JSON Lines file if it exists."""
        if not self.path.exists():
            logger.info(f"No outcome history at {self.path}, starting fresh")
            return

        try:
            lines = self.path.read_text(encoding='utf-8').splitlines()
        except OSError as e:
            logger.warning(f"Could not read outcome history {self.path}: {e}")
            return

        skipped = 0
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                self._history.append(OutcomeRecord.from_json(line))
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                skipped += 1
                logger.warning(f"Skipping unreadable outcome at {self.path}:{line_number}: {e}")

        logger.info(f"Loaded {len(self._history)} outcome(s) from {self.path}"
                    + (f", skipped {skipped}" if skipped else ""))

    def _append_to_disk(self, records: List[OutcomeRecord]) -> None:
        if self.path is None or not records:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'a', encoding='utf-8') as f:
                for record in records:
                    f.write(record.to_json() + '\n')
        except OSError as e:
            logger.warning(f"Could not persist outcomes to {self.path}: {e}")
