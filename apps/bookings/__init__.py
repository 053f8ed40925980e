"""Bookings app package.

This app owns the reservation lifecycle: the price calculator, the
reservation state machine and the command handlers that move a
reservation from request to confirmation or cancellation. Dates are
held and committed through the availability ledger of the properties
app, inside the same database transaction as the status change.
"""
