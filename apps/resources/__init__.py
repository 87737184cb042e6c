"""Resources app package.

Catalog of bookable resources (rooms, equipment) of an organization:
location, approval policy, the managers who approve bookings, and the
display order used by the booking grid.
"""
