"""Bookings app package.

This app encapsulates the reservation engine: booking requests resolved
against the organization's schedule template, conflict detection on
half-open time slots, the pending/approved/rejected state machine,
week duplication, and the consistency sweeper that reclaims bookings of
deleted resources. Conflict-check-and-persist runs in one transaction
serialized per (resource, date) by a lock row.
"""
