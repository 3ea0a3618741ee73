"""Shared utilities and cross-domain components.

This module contains utilities used across multiple domains:
- HTTP exception classes rendered as ``{"message": ...}`` responses
- The permission system and its authorization decision engine
"""
