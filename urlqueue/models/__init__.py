"""
Models Module
=============

Pydantic models for request descriptors, queue payloads and response metadata.
"""
