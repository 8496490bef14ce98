'''
Visit Analytics Test Suite

Test Modules:
-------------
- test_rating_scale.py: token -> score conversion and presence checks
- test_period_partitioner.py: bucket coverage, counts and labels per range kind
- test_record_aggregator.py: null-aware averages, grouping order, idempotence
- test_derived_metrics.py: coverage, participation, ranking, breakdowns
- test_aggregation_facade.py: named analytics queries over an in-memory store
- test_visit_store.py: SQL builders and the asyncpg store with a mocked pool
- test_database.py: pool lifecycle and query helpers
- test_config.py: environment-driven settings
- test_api.py: FastAPI router with dependency overrides

Running Tests:
--------------
    pytest visit_analytics/tests/ -v
    pytest -m parity
    pytest -m "not slow"
'''
