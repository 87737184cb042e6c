from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError  # type: ignore

from apps.bookings.sweeper import reconcile
from apps.bookings.tasks import reconcile_all_organizations
from apps.users.models import Organization


class Command(BaseCommand):
    help = "Removes bookings of deleted resources and refreshes today's counters"

    def add_arguments(self, parser):  # type: ignore
        parser.add_argument(
            "--organization",
            type=int,
            help="Only sweep the organization with this id",
        )

    def handle(self, *args, **options):  # type: ignore
        organization_id = options.get("organization")
        if organization_id is None:
            summary = reconcile_all_organizations()
            self.stdout.write(
                self.style.SUCCESS(
                    f"Swept {summary['organizations']} organizations, removed {summary['removed']} bookings"
                )
            )
            return

        if not Organization.objects.filter(pk=organization_id).exists():
            raise CommandError(f"Organization {organization_id} does not exist")

        result = reconcile(organization_id)
        self.stdout.write(
            self.style.SUCCESS(
                f"Organization {organization_id}: scanned {result.scanned}, "
                f"removed {result.removed}, failed {result.failed}"
            )
        )
