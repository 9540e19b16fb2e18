"""
Tests for Continuation Machine

Organized by subsystem:
- test_scheduler.py: escalation, budgets, short-circuit, cap
- test_signals.py: termination protocol
- test_hygiene.py: deferred materialization and tags
- test_abort.py: abort hooks
- test_consumers.py: for-each and friends, end to end
- test_config.py, test_trace.py, test_cli.py: ambient layers
"""
