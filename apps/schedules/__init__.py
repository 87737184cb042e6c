"""Schedules app package.

Stores each organization's schedule template: the ordered list of named
periods (e.g. "Period 1", 09:00-09:40) that discretizes the booking
grid. The template is replaced wholesale by an organization admin and
read by the booking engine to resolve period indices into times.
"""
