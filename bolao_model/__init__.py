# Bolao Closure Engine
# Pooled lottery closing: converts pooled funds into physical wagers
#
# Architecture:
# - engines/: Wager allocation (DP knapsack, CP-SAT cross-check)
# - selection/: Pattern analysis, greedy anti-pattern selection, consolidation
# - closure/: Pool FSM, closure record + fingerprint, storage boundary, orchestrator

__version__ = "1.0.0"
__author__ = "Bolao Team"
