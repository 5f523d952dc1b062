"""
Integration Tests - End-to-End Reporter Tests.

These tests verify that all components work together correctly.
They use the InMemoryStorageClient to avoid external dependencies
while exercising the full probe, flush and stop lifecycle.

Test Files:
    - test_reporter_lifecycle.py: Full reporter lifecycle
"""
