"""
Action Policy

Recommends the ordered actions a generated test should perform against an
element. Uses a small neural network trained on outcome history when one is
available and a fixed heuristic otherwise.

Model availability is a single ``_ModelSlot`` reference that background jobs
replace as a whole, so ``recommend()`` never waits for loading or training.
"""

import logging
import warnings
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Sequence

import joblib
import numpy as np
from sklearn.exceptions import ConvergenceWarning
from sklearn.neural_network import MLPClassifier

from ..config import LearningConfig
from ..errors import TrainingError
from ..exploration.elements.models import ElementDescriptor, ElementKind
from .models import ActionRecommendation, ActionStep, ActionType, OutcomeRecord
from .outcome_store import OutcomeStore

logger = logging.getLogger(__name__)


class ModelState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class _ModelSlot:
    state: ModelState
    model: Any = None


def encode_outcome(record: OutcomeRecord) -> List[float]:
    """Feature vector for a historical outcome."""
    return [
        float(len(record.selector)),
        1.0 if record.action == ActionType.CLICK.value else 0.0,
        float(len(record.error_message or '')),
    ]


def default_recommendation(selector: str) -> ActionRecommendation:
    """Recommendation used when no trained model is available."""
    return [
        ActionStep(ActionType.CLICK, selector),
        ActionStep(ActionType.VALIDATE, selector),
    ]


class ActionPolicy:
    """
    Maps element descriptors to action recommendations.

    Training and model loading run on a single background worker; their
    failures are logged and leave ``recommend()`` on its current model or on
    the default heuristic.
    """

    def __init__(self, config: Optional[LearningConfig] = None,
                 store: Optional[OutcomeStore] = None,
                 executor: Optional[Executor] = None):
        self.config = config or LearningConfig()
        self.store = store
        self._slot = _ModelSlot(ModelState.UNLOADED)
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix='action-policy')

    @property
    def state(self) -> ModelState:
        return self._slot.state

    @property
    def model_available(self) -> bool:
        return self._slot.state is ModelState.READY

    def set_model(self, model: Any) -> None:
        """Swap in a fitted model exposing ``predict_proba`` and ``classes_``."""
        self._slot = _ModelSlot(ModelState.READY, model)

    def recommend(self, element: ElementDescriptor) -> ActionRecommendation:
        """
        Recommend the actions to perform against *element*.

        Args:
            element: Discovered element descriptor

        Returns:
            Ordered action steps; ``[click, validate]`` without a model
        """
        slot = self._slot
        if slot.state is not ModelState.READY:
            return default_recommendation(element.selector)

        try:
            features = np.array([self.encode_element(element)], dtype=float)
            likelihood = self._success_likelihood(slot.model, features)
        except Exception as e:
            logger.warning(f"Model inference failed for {element.selector}, using default: {e}")
            return default_recommendation(element.selector)

        if likelihood >= self.config.threshold:
            primary = ActionType.FILL if element.kind in (ElementKind.INPUT, ElementKind.TEXTAREA) else ActionType.CLICK
            return [
                ActionStep(primary, element.selector),
                ActionStep(ActionType.VALIDATE, element.selector),
            ]
        return [ActionStep(ActionType.VALIDATE, element.selector)]

    def encode_element(self, element: ElementDescriptor) -> List[float]:
        """Feature vector for an element, using its latest recorded error if any."""
        error_length = 0
        if self.store is not None:
            for record in reversed(self.store.for_selector(element.selector)):
                if record.error_message:
                    error_length = len(record.error_message)
                    break

        return [
            float(len(element.selector)),
            1.0 if ActionType.CLICK.value in element.interactions else 0.0,
            float(error_length),
        ]

    def train(self, history: Optional[Sequence[OutcomeRecord]] = None) -> Future:
        """
        Schedule a training run in the background.

        Args:
            history: Records to train on; defaults to the store's full history

        Returns:
            Future resolving to True when a new model was trained and swapped in
        """
        if history is None:
            history = self.store.history if self.store is not None else []
        records = list(history)
        return self._executor.submit(self._train, records)

    def load_async(self, path: Optional[Path] = None) -> Future:
        """Schedule loading the persisted model. Resolves to True on success."""
        path = Path(path) if path else self.config.model_path
        if self._slot.state is ModelState.UNLOADED:
            self._slot = _ModelSlot(ModelState.LOADING)
        return self._executor.submit(self._load, path)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _train(self, records: List[OutcomeRecord]) -> bool:
        try:
            model = self._fit(records)
        except TrainingError as e:
            logger.warning(f"Skipping model training: {e}")
            return False
        except Exception as e:
            logger.error(f"Model training failed: {e}", exc_info=True)
            return False

        self.set_model(model)
        logger.info(f"🧠 Trained action model on {len(records)} outcome(s)")
        self._save(model)
        return True

    def _fit(self, records: List[OutcomeRecord]) -> MLPClassifier:
        labels = np.array([1 if r.success else 0 for r in records], dtype=int)
        if len(np.unique(labels)) < 2:
            raise TrainingError(
                f"need both successful and failed outcomes, got {len(records)} record(s) of one class"
            )
        features = np.array([encode_outcome(r) for r in records], dtype=float)

        model = MLPClassifier(
            hidden_layer_sizes=tuple(self.config.hidden_layers),
            activation='relu',
            solver='adam',
            learning_rate_init=self.config.learning_rate,
            max_iter=self.config.max_iter,
            random_state=self.config.random_state,
        )
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', ConvergenceWarning)
            model.fit(features, labels)
        return model

    def _load(self, path: Path) -> bool:
        loaded = False
        try:
            if not path.exists():
                logger.info(f"No saved action model at {path}; using default recommendations")
                return False
            model = joblib.load(path)
            if not hasattr(model, 'predict_proba'):
                raise TypeError(f"{type(model).__name__} is not a classifier")
            self.set_model(model)
            loaded = True
            logger.info(f"✅ Loaded action model from {path}")
        except Exception as e:
            logger.warning(f"Could not load action model from {path}: {e}")
        finally:
            if not loaded and self._slot.state is ModelState.LOADING:
                self._slot = _ModelSlot(ModelState.UNLOADED)
        return loaded

    def _save(self, model: MLPClassifier) -> bool:
        path = self.config.model_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            joblib.dump(model, path)
            return True
        except Exception as e:
            logger.warning(f"Could not save action model to {path}: {e}")
            return False

    @staticmethod
    def _success_likelihood(model: Any, features: np.ndarray) -> float:
        probabilities = model.predict_proba(features)[0]
        classes = list(model.classes_)
        if 1 not in classes:
            return 0.0
        return float(probabilities[classes.index(1)])
