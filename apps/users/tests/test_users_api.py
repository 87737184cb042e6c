"""API tests for authentication and the current actor profile."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import Organization, User


class AuthAPITests(APITestCase):
    def setUp(self) -> None:
        self.organization = Organization.objects.create(name="Riverside School")
        self.user = User.objects.create_user(
            email="rivera@example.com",
            username="Ms. Rivera",
            password="StrongPass123",
            organization=self.organization,
        )

    def test_token_obtain_returns_access_and_refresh(self) -> None:
        response = self.client.post(
            reverse("auth:token_obtain"),
            {"email": "rivera@example.com", "password": "StrongPass123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)

    def test_token_obtain_rejects_wrong_password(self) -> None:
        response = self.client.post(
            reverse("auth:token_obtain"),
            {"email": "rivera@example.com", "password": "wrong"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn("error", response.data)

    def test_bearer_token_authenticates_me(self) -> None:
        tokens = self.client.post(
            reverse("auth:token_obtain"),
            {"email": "rivera@example.com", "password": "StrongPass123"},
            format="json",
        ).data
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["email"], "rivera@example.com")
        self.assertEqual(response.data["display_name"], "Ms. Rivera")
        self.assertEqual(response.data["role"], User.RoleChoices.MEMBER)
        self.assertEqual(response.data["organization"]["id"], self.organization.pk)

    def test_me_requires_authentication(self) -> None:
        response = self.client.get(reverse("user-me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserModelTests(APITestCase):
    def test_display_name_falls_back_to_email(self) -> None:
        user = User.objects.create_user(email="nobody@example.com", password="x")
        self.assertEqual(user.display_name, "nobody@example.com")

        user.first_name, user.last_name = "Ada", "Lovelace"
        self.assertEqual(user.display_name, "Ada Lovelace")

    def test_superuser_is_organization_admin(self) -> None:
        admin = User.objects.create_superuser(email="root@example.com", password="x")
        self.assertEqual(admin.role, User.RoleChoices.ADMIN)
        self.assertTrue(admin.is_organization_admin())
