"""
Shared Kernel

Building blocks shared by the schedule, resource and booking apps:
value objects for periods and time slots, the reservation error
taxonomy and the API glue that renders those errors.
"""
