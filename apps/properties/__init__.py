"""Properties app package.

This app holds the property record the booking core reads at request
time (rate, cleaning fee, minimum stay, capacity) and the availability
ledger: the per-property calendar of held and booked date ranges.
"""
