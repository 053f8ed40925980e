"""
Shared Kernel

This module contains base classes and utilities shared across all bounded contexts
of the booking core: value objects, domain events, the error taxonomy,
the message bus and the unit of work.
"""
