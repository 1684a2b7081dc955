"""
shared/__init__.py

Shared utilities and models used across multiple modules.

This package contains common functionality that is used by multiple
components of the parenting assistant:
- models: Common data structures and type definitions
- errors: Failure taxonomy of the external collaborators
- search_client: HTTP client for the web search collaborator
- utils: Utility functions and helpers
"""
