"""
Test Suite
==========

Test suite matching the urlqueue/ package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: Queue and transport against a local aiohttp server
"""
