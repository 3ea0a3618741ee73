"""Core application components.

This module provides the foundational components for the QA Manager API:
- In-process data store used by the membership and resource lookups
- Application settings and configuration
- Logging setup shared across domains
"""
