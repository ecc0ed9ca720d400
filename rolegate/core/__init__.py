"""Core application components.

This module provides the foundational components for the permission engine:
- Application settings and configuration
"""
