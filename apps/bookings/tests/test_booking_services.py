"""Tests for the booking engine services."""

from __future__ import annotations

from datetime import date, time
from unittest import mock

from django.db import OperationalError
from django.test import TestCase, override_settings

from apps.bookings import services
from apps.bookings.models import Booking, ResourceDay
from apps.resources.services import create_resource
from apps.schedules.services import save_template
from apps.users.models import Organization, User
from shared.domain.exceptions import (
    Forbidden,
    InvalidRange,
    InvalidState,
    NoSchedule,
    NotFound,
    PolicyViolation,
    SlotConflict,
)
from shared.domain.value_objects import Period, TimeSlot

MONDAY = date(2024, 3, 4)
NEXT_MONDAY = date(2024, 3, 11)

PERIODS = [
    {"name": "Period 1", "start": "09:00", "end": "09:40"},
    {"name": "Period 2", "start": "09:40", "end": "10:20"},
    {"name": "Period 3", "start": "10:20", "end": "11:00"},
]


class BookingEngineTestCase(TestCase):
    def setUp(self) -> None:
        self.organization = Organization.objects.create(name="Riverside School")
        self.owner = User.objects.create_user(
            email="owner@example.com",
            username="Ms. Rivera",
            password="x",
            organization=self.organization,
        )
        self.other = User.objects.create_user(
            email="other@example.com",
            password="x",
            organization=self.organization,
        )
        self.manager = User.objects.create_user(
            email="manager@example.com",
            password="x",
            organization=self.organization,
        )
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="x",
            role=User.RoleChoices.ADMIN,
            organization=self.organization,
        )
        save_template(self.organization, PERIODS)
        self.room = create_resource(self.organization, name="Room 101")
        self.lab = create_resource(
            self.organization,
            name="Science Lab",
            approval_required=True,
            managers=[self.manager],
        )

    def book(self, resource=None, day=MONDAY, start=0, end=0, actor=None, purpose=""):
        return services.request_booking(
            actor or self.owner,
            resource_id=(resource or self.room).pk,
            booking_date=day,
            start_period=start,
            end_period=end,
            purpose=purpose,
        )


class ResolveSlotTests(TestCase):
    periods = [Period.from_dict(entry) for entry in PERIODS]

    def test_empty_template(self) -> None:
        with self.assertRaises(NoSchedule):
            services.resolve_slot([], 0, 0)

    def test_reversed_range(self) -> None:
        with self.assertRaises(InvalidRange):
            services.resolve_slot(self.periods, 2, 1)

    def test_out_of_range_indices(self) -> None:
        with self.assertRaises(InvalidRange):
            services.resolve_slot(self.periods, 0, 3)
        with self.assertRaises(InvalidRange):
            services.resolve_slot(self.periods, -1, 0)

    def test_run_of_periods(self) -> None:
        slot = services.resolve_slot(self.periods, 0, 1)
        self.assertEqual(slot, TimeSlot(time(9, 0), time(10, 20)))


class RequestBookingTests(BookingEngineTestCase):
    def test_instant_confirm_resource_is_approved(self) -> None:
        booking = self.book(purpose="Maths")
        self.assertEqual(booking.status, Booking.Status.APPROVED)
        self.assertEqual(booking.resource_name, "Room 101")
        self.assertEqual(booking.owner_display_name, "Ms. Rivera")
        self.assertEqual((booking.start_time, booking.end_time), (time(9, 0), time(9, 40)))
        self.assertEqual(booking.purpose, "Maths")

    def test_approval_required_resource_is_pending(self) -> None:
        booking = self.book(self.lab)
        self.assertEqual(booking.status, Booking.Status.PENDING)

    def test_no_schedule(self) -> None:
        save_template(self.organization, [])
        with self.assertRaises(NoSchedule):
            self.book()

    def test_invalid_range(self) -> None:
        with self.assertRaises(InvalidRange):
            self.book(start=2, end=1)

    def test_adjacent_slots_do_not_conflict(self) -> None:
        self.book(start=0, end=0)
        second = self.book(start=1, end=1, actor=self.other)
        self.assertEqual((second.start_time, second.end_time), (time(9, 40), time(10, 20)))
        self.assertEqual(Booking.objects.count(), 2)

    def test_overlap_conflicts(self) -> None:
        self.book(start=0, end=1)
        with self.assertRaises(SlotConflict):
            self.book(start=1, end=2, actor=self.other)
        self.assertEqual(Booking.objects.count(), 1)

    def test_pending_booking_holds_its_slot(self) -> None:
        self.book(self.lab)
        with self.assertRaises(SlotConflict):
            self.book(self.lab, actor=self.other)

    def test_rejected_booking_frees_its_slot(self) -> None:
        booking = self.book(self.lab)
        services.reject_booking(booking.pk, self.manager)

        again = self.book(self.lab, actor=self.other)
        self.assertEqual(again.status, Booking.Status.PENDING)

    def test_other_resource_or_date_does_not_conflict(self) -> None:
        self.book()
        self.book(self.lab)
        self.book(day=NEXT_MONDAY)
        self.assertEqual(Booking.objects.count(), 3)

    def test_bumps_resource_day_revision(self) -> None:
        self.book(start=0, end=0)
        self.book(start=1, end=1)
        lock = ResourceDay.objects.get(resource=self.room, date=MONDAY)
        self.assertEqual(lock.revision, 2)

    def test_unknown_resource(self) -> None:
        with self.assertRaises(NotFound):
            services.request_booking(
                self.owner, resource_id=999999, booking_date=MONDAY, start_period=0, end_period=0
            )

    def test_resource_of_other_organization(self) -> None:
        elsewhere = create_resource(Organization.objects.create(name="Hillside"), name="Hall")
        with self.assertRaises(NotFound):
            self.book(elsewhere)


class RetryTests(BookingEngineTestCase):
    @mock.patch("apps.bookings.services.time.sleep")
    def test_transient_abort_then_success(self, sleep) -> None:
        with mock.patch(
            "apps.bookings.services.ensure_slot_is_free",
            side_effect=[OperationalError("database is locked"), None],
        ):
            booking = self.book()

        self.assertEqual(booking.status, Booking.Status.APPROVED)
        self.assertEqual(Booking.objects.count(), 1)
        sleep.assert_called_once()

    @override_settings(BOOKING_CONFLICT_RETRIES=3)
    @mock.patch("apps.bookings.services.time.sleep")
    def test_exhausted_retries_surface_slot_conflict(self, sleep) -> None:
        with mock.patch(
            "apps.bookings.services.ensure_slot_is_free",
            side_effect=OperationalError("could not serialize access"),
        ) as check:
            with self.assertRaises(SlotConflict):
                self.book()

        self.assertEqual(check.call_count, 3)
        self.assertEqual(sleep.call_count, 2)
        self.assertFalse(Booking.objects.exists())


class ApprovalTests(BookingEngineTestCase):
    def test_manager_approves_pending(self) -> None:
        booking = self.book(self.lab)
        approved = services.approve_booking(booking.pk, self.manager)
        self.assertEqual(approved.status, Booking.Status.APPROVED)

    def test_second_transition_is_invalid(self) -> None:
        booking = self.book(self.lab)
        services.approve_booking(booking.pk, self.manager)

        with self.assertRaises(InvalidState):
            services.approve_booking(booking.pk, self.manager)
        with self.assertRaises(InvalidState):
            services.reject_booking(booking.pk, self.manager)

        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.APPROVED)

    def test_rejected_is_terminal(self) -> None:
        booking = self.book(self.lab)
        services.reject_booking(booking.pk, self.manager)
        with self.assertRaises(InvalidState):
            services.approve_booking(booking.pk, self.manager)

    def test_non_manager_is_forbidden_regardless_of_status(self) -> None:
        pending = self.book(self.lab)
        with self.assertRaises(Forbidden):
            services.approve_booking(pending.pk, self.owner)
        with self.assertRaises(Forbidden):
            services.reject_booking(pending.pk, self.admin)

        # Already approved: still Forbidden, not InvalidState.
        approved = self.book()
        with self.assertRaises(Forbidden):
            services.approve_booking(approved.pk, self.other)

    def test_manager_set_is_read_at_action_time(self) -> None:
        booking = self.book(self.lab)
        self.lab.managers.set([self.other])
        with self.assertRaises(Forbidden):
            services.approve_booking(booking.pk, self.manager)
        self.assertEqual(services.approve_booking(booking.pk, self.other).status, Booking.Status.APPROVED)

    def test_pending_approvals_lists_managed_resources_only(self) -> None:
        later = self.book(self.lab, start=2, end=2)
        earlier = self.book(self.lab, start=0, end=0, actor=self.other)
        self.book()

        queue = list(services.pending_approvals(self.manager))
        self.assertEqual(queue, [earlier, later])
        self.assertEqual(list(services.pending_approvals(self.other)), [])


class CancelAndEditTests(BookingEngineTestCase):
    def test_owner_cancels(self) -> None:
        booking = self.book()
        services.cancel_booking(booking.pk, self.owner)
        self.assertFalse(Booking.objects.exists())

    def test_manager_cancels_any_status(self) -> None:
        booking = self.book(self.lab)
        services.reject_booking(booking.pk, self.manager)
        services.cancel_booking(booking.pk, self.manager)
        self.assertFalse(Booking.objects.exists())

    def test_stranger_cannot_cancel(self) -> None:
        booking = self.book()
        with self.assertRaises(Forbidden):
            services.cancel_booking(booking.pk, self.other)
        self.assertTrue(Booking.objects.filter(pk=booking.pk).exists())

    def test_cancel_frees_the_slot(self) -> None:
        booking = self.book()
        services.cancel_booking(booking.pk, self.owner)
        self.book(actor=self.other)

    def test_owner_updates_purpose(self) -> None:
        booking = self.book(purpose="Maths")
        updated = services.update_purpose(booking.pk, "Physics", self.owner)
        self.assertEqual(updated.purpose, "Physics")

    def test_only_owner_updates_purpose(self) -> None:
        booking = self.book(self.lab)
        with self.assertRaises(Forbidden):
            services.update_purpose(booking.pk, "Hijack", self.manager)

    def test_missing_booking(self) -> None:
        with self.assertRaises(NotFound):
            services.cancel_booking(424242, self.owner)


class DuplicateTests(BookingEngineTestCase):
    def test_duplicates_to_next_week(self) -> None:
        source = self.book(start=0, end=1, purpose="Weekly review")
        copy = services.duplicate_to_next_week(source.pk, self.owner)

        self.assertEqual(copy.date, NEXT_MONDAY)
        self.assertEqual(copy.status, Booking.Status.APPROVED)
        self.assertEqual((copy.start_time, copy.end_time), (time(9, 0), time(10, 20)))
        self.assertEqual(copy.purpose, "Weekly review")
        self.assertEqual(copy.resource_id, self.room.pk)

    def test_conflict_on_target_date_creates_nothing(self) -> None:
        source = self.book(start=0, end=1)
        self.book(day=NEXT_MONDAY, start=1, end=1, actor=self.other)

        with self.assertRaises(SlotConflict):
            services.duplicate_to_next_week(source.pk, self.owner)
        self.assertEqual(Booking.objects.filter(date=NEXT_MONDAY).count(), 1)

    def test_approval_required_resource_is_refused(self) -> None:
        source = self.book(self.lab)
        services.approve_booking(source.pk, self.manager)
        with self.assertRaises(PolicyViolation):
            services.duplicate_to_next_week(source.pk, self.owner)

    def test_only_owner_duplicates(self) -> None:
        source = self.book()
        with self.assertRaises(Forbidden):
            services.duplicate_to_next_week(source.pk, self.other)

    def test_deleted_resource(self) -> None:
        source = self.book()
        self.room.delete()
        with self.assertRaises(NotFound):
            services.duplicate_to_next_week(source.pk, self.owner)
