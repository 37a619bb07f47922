# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Application initialization and default project seeding
- db: Database configuration and connection management
- errors: Batch-fatal sync errors
- retry: Bounded retry with exponential backoff
"""
