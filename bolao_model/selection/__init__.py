# Selection Module: pattern analysis and wager number selection
from .patterns import PatternAnalyzer, QualityReport, QualityIssue
from .greedy import GreedySelector, Strictness, CandidateNumber, SelectionResult
from .weighted import generate_weighted_numbers, weighted_sample_without_replacement
from .consolidation import ConsolidationEngine, rank_by_votes, rank_by_score

__all__ = [
    'PatternAnalyzer',
    'QualityReport',
    'QualityIssue',
    'GreedySelector',
    'Strictness',
    'CandidateNumber',
    'SelectionResult',
    'generate_weighted_numbers',
    'weighted_sample_without_replacement',
    'ConsolidationEngine',
    'rank_by_votes',
    'rank_by_score'
]
