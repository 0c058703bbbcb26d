"""Chat app package.

Messages exchanged by the renter and the owner of a booking. Messaging is
open only while the booking is active, and the agreement step requires at
least one message on the thread.
"""
