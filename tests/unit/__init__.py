"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested in isolation with stub clients and a virtual
clock. Unit tests should be fast, deterministic, and focused.

Test Files:
    - test_metrics_reporter.py: Lifecycle, probing, flushing, events
    - test_scheduler.py: Retrying and recurring schedules
    - test_collection_registry.py: Membership and finalization
    - test_snapshot_serializer.py: Snapshot to batch transform
    - test_elasticsearch_client.py: ping/bulk adapter
    - test_config_loader.py: Configuration loading/validation
"""
