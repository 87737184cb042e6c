"""Resource catalog models."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Resource(models.Model):
    """A bookable room or piece of equipment."""

    organization = models.ForeignKey(
        "users.Organization",
        on_delete=models.CASCADE,
        related_name="resources",
    )
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True)
    approval_required = models.BooleanField(
        default=False,
        help_text=_("Bookings stay pending until a manager approves them."),
    )
    managers = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="managed_resources",
        help_text=_("Members who approve, reject and cancel bookings of this resource."),
    )
    display_order = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Position in listings; empty means after all ordered resources."),
    )
    image_ref = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Resource")
        verbose_name_plural = _("Resources")
        ordering = [models.F("display_order").asc(nulls_last=True), "id"]
        indexes = [
            models.Index(fields=["organization", "display_order"], name="resource_org_order_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.location})" if self.location else self.name

    @property
    def is_instant_confirm(self) -> bool:
        return not self.approval_required

    def manager_ids(self) -> set[int]:
        return set(self.managers.values_list("id", flat=True))

    def is_manager(self, user) -> bool:
        if user is None or not getattr(user, "pk", None):
            return False
        return self.managers.filter(pk=user.pk).exists()
