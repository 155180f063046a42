"""
Property-based testing using Hypothesis.

This package contains property tests that verify mathematical invariants
hold across randomly generated inputs. These tests are more comprehensive
than parameterized tests because they explore the full input space.

Modules:
    test_scheme_properties: Discretization scheme invariants (linearity, positivity, reductions)
    test_pricer_properties: Aggregation and knock-out invariants
"""
