"""
Core Module
===========

Dispatch queue, transports and error types.
"""
