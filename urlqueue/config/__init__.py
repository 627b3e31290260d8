"""
Configuration Management
=======================

Environment-based configuration using Pydantic Settings.

Components:
- settings: Queue and transport settings
- logging: Structured logging configuration
"""
