"""Notifications app package.

Consumes reservation lifecycle events from the message bus and stores an
inbox entry for the party that did not act. Delivery over other
channels is not handled here.
"""
