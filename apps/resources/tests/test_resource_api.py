"""Tests for the resource catalog."""

from __future__ import annotations

from datetime import date, time
from unittest import mock

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.resources.models import Resource
from apps.resources.services import create_resource, list_resources, reorder, update_resource
from apps.users.models import Organization, User
from shared.domain.exceptions import ManagerRequired, NotFound


class ResourceServiceTests(TestCase):
    def setUp(self) -> None:
        self.organization = Organization.objects.create(name="Riverside School")
        self.manager = User.objects.create_user(
            email="manager@example.com",
            password="x",
            organization=self.organization,
        )

    def test_approval_required_needs_a_manager(self) -> None:
        with self.assertRaises(ManagerRequired):
            create_resource(self.organization, name="Gym", approval_required=True)
        self.assertFalse(Resource.objects.exists())

    def test_turning_on_approval_checks_resulting_managers(self) -> None:
        resource = create_resource(self.organization, name="Gym")
        with self.assertRaises(ManagerRequired):
            update_resource(resource, approval_required=True)

        update_resource(resource, approval_required=True, managers=[self.manager])
        resource.refresh_from_db()
        self.assertTrue(resource.approval_required)
        self.assertEqual(resource.manager_ids(), {self.manager.pk})

    def test_new_resources_are_appended_after_max_order(self) -> None:
        first = create_resource(self.organization, name="Room 1")
        second = create_resource(self.organization, name="Room 2")
        self.assertEqual(first.display_order, 100)
        self.assertEqual(second.display_order, 200)

    def test_unset_order_sorts_last_then_by_id(self) -> None:
        unset_a = create_resource(self.organization, name="Unset A")
        Resource.objects.filter(pk=unset_a.pk).update(display_order=None)
        ordered = create_resource(self.organization, name="Ordered", display_order=500)
        unset_b = create_resource(self.organization, name="Unset B")
        Resource.objects.filter(pk=unset_b.pk).update(display_order=None)
        early = create_resource(self.organization, name="Early", display_order=10)

        names = [resource.name for resource in list_resources(self.organization)]
        self.assertEqual(names, ["Early", "Ordered", "Unset A", "Unset B"])
        self.assertLess(unset_a.pk, unset_b.pk)
        self.assertEqual(ordered.display_order, 500)

    def test_reorder_swaps_two_values(self) -> None:
        a = create_resource(self.organization, name="A", display_order=100)
        b = create_resource(self.organization, name="B", display_order=300)
        c = create_resource(self.organization, name="C", display_order=200)

        reorder(self.organization, a.pk, b.pk)

        values = dict(Resource.objects.values_list("name", "display_order"))
        self.assertEqual(values, {"A": 300, "B": 100, "C": 200})
        self.assertEqual(c.display_order, 200)

    def test_reorder_swaps_unset_order(self) -> None:
        a = create_resource(self.organization, name="A", display_order=100)
        b = create_resource(self.organization, name="B")
        Resource.objects.filter(pk=b.pk).update(display_order=None)

        first, second = reorder(self.organization, a.pk, b.pk)
        self.assertIsNone(first.display_order)
        self.assertEqual(second.display_order, 100)

    def test_reorder_rejects_foreign_resource(self) -> None:
        other = Organization.objects.create(name="Hillside School")
        mine = create_resource(self.organization, name="Mine")
        theirs = create_resource(other, name="Theirs")
        with self.assertRaises(NotFound):
            reorder(self.organization, mine.pk, theirs.pk)


class ResourceAPITests(APITestCase):
    def setUp(self) -> None:
        self.organization = Organization.objects.create(name="Riverside School")
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="x",
            role=User.RoleChoices.ADMIN,
            organization=self.organization,
        )
        self.member = User.objects.create_user(
            email="member@example.com",
            password="x",
            organization=self.organization,
        )
        self.list_url = reverse("resource-list")

    def test_admin_creates_resource(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            self.list_url,
            {"name": "Science Lab", "location": "Building B", "approval_required": True, "managers": [self.member.pk]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["managers"], [self.member.pk])
        self.assertEqual(response.data["display_order"], 100)

    def test_approval_without_manager_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            self.list_url,
            {"name": "Science Lab", "approval_required": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "manager_required")

    def test_manager_from_other_organization_is_rejected(self) -> None:
        outsider = User.objects.create_user(
            email="outsider@example.com",
            password="x",
            organization=Organization.objects.create(name="Hillside School"),
        )
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            self.list_url,
            {"name": "Science Lab", "approval_required": True, "managers": [outsider.pk]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("does not exist", str(response.data["detail"]["managers"]))
        self.assertFalse(Resource.objects.filter(name="Science Lab").exists())

    def test_manager_update_cannot_reach_other_organizations(self) -> None:
        other = Organization.objects.create(name="Hillside School")
        outsider = User.objects.create_user(email="outsider@example.com", password="x", organization=other)
        resource = create_resource(self.organization, name="Gym")
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            reverse("resource-detail", args=[resource.pk]),
            {"managers": [self.member.pk, outsider.pk]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        errors = str(response.data["detail"]["managers"])
        self.assertIn("does not exist", errors)
        self.assertNotIn("organization", errors)
        self.assertEqual(resource.manager_ids(), set())

    def test_member_lists_but_cannot_create(self) -> None:
        create_resource(self.organization, name="Room 1")
        create_resource(Organization.objects.create(name="Hillside School"), name="Elsewhere")
        self.client.force_authenticate(self.member)

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([r["name"] for r in response.data], ["Room 1"])

        response = self.client.post(self.list_url, {"name": "Room 2"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_reorder_endpoint(self) -> None:
        a = create_resource(self.organization, name="A")
        b = create_resource(self.organization, name="B")
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("resource-reorder"),
            {"first": a.pk, "second": b.pk},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([r["display_order"] for r in response.data["resources"]], [200, 100])

    def test_delete_keeps_bookings_and_queues_sweep(self) -> None:
        resource = create_resource(self.organization, name="Room 1")
        booking = Booking.objects.create(
            organization=self.organization,
            resource=resource,
            resource_name=resource.name,
            owner=self.member,
            date=date(2024, 3, 4),
            start_time=time(9, 0),
            end_time=time(9, 40),
            status=Booking.Status.APPROVED,
        )
        self.client.force_authenticate(self.admin)

        with mock.patch("apps.bookings.tasks.reconcile_organization") as task:
            with self.captureOnCommitCallbacks(execute=True):
                response = self.client.delete(reverse("resource-detail", args=[resource.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Resource.objects.filter(pk=resource.pk).exists())
        self.assertTrue(Booking.objects.filter(pk=booking.pk).exists())
        task.delay.assert_called_once_with(self.organization.pk)
