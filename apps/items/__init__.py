"""Items app package.

Rentable items listed by owners. The booking core only reads items: it
snapshots the owner, price and allowed delivery methods when a booking is
requested. Item editing, images and search live outside this backend.
"""
