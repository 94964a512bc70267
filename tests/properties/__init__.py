"""
Property-based testing using Hypothesis.

This package contains property tests that verify mathematical invariants
hold across randomly generated inputs.

Modules:
    test_payoff_properties: Lookback payoff invariants (bounds, monotonicity)
    test_aggregation_properties: Batch splitting and exact reduction
"""
