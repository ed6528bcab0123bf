"""
Controller Tests

Tests for the single-car controller and its infrastructure:
- Request queue ordering
- Dispatch, timed phases and re-entrant requests
- Broker delivery, request inbox and configuration
- Run statistics
"""
