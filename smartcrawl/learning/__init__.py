"""
Learning Package

Turns the outcomes of executed tests into defect patterns and action
recommendations for the next test generation run.
"""

from .models import ActionType, ActionStep, ActionRecommendation, OutcomeRecord, DefectPattern
from .outcome_store import OutcomeStore, parse_outcomes
from .defect_patterns import DefectPatternAggregator
from .policy import ActionPolicy, ModelState, default_recommendation, encode_outcome
from .engine import LearningEngine, ElementInsight

__all__ = [
    'ActionType', 'ActionStep', 'ActionRecommendation', 'OutcomeRecord', 'DefectPattern',
    'OutcomeStore', 'parse_outcomes',
    'DefectPatternAggregator',
    'ActionPolicy', 'ModelState', 'default_recommendation', 'encode_outcome',
    'LearningEngine', 'ElementInsight'
]
