"""
EVALs Suite for PyConjoint - Tests Aimed at the Edges of the Estimator

Philosophy:
    These tests target degenerate data, numerical limits and ambiguous
    inputs rather than typical runs.
    - Every stage must return a well-formed result on empty or tiny input
    - Divergence is reported with a warning, never with NaN results
    - Use pytest.mark.xfail for known issues (expected failures)

Run tests:
    pytest tests/evals/ -v                    # Run all evals
    pytest tests/ --ignore=tests/evals/      # Run regular tests only
"""
