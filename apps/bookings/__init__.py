"""Bookings app package.

This app holds the booking lifecycle engine: the ``Booking`` aggregate and
its state machine, the availability ledger derived from active bookings,
the two-party agreement protocol and the REST API over them. Every state
change runs in one database transaction, guarded by row locks and a
version check on the booking row.
"""
