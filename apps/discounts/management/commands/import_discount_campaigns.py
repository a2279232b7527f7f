"""
Management command to import discount campaigns from a JSON file.

Usage:
    python manage.py import_discount_campaigns campaigns.json
    python manage.py import_discount_campaigns campaigns.json --dry-run

The file holds one campaign object or a list of them, in the same camelCase
shape accepted by the discount-set API. Campaigns are matched by name and
updated in place, otherwise created.
"""

import json

from django.core.management.base import BaseCommand, CommandError

from apps.discounts.models import DiscountSet
from apps.discounts.serializers import DiscountSetSerializer


class Command(BaseCommand):
    """Management command to import discount campaigns."""

    help = "Import discount campaigns from a JSON file"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("path", type=str, help="Path to the JSON file")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Validate campaigns without saving them",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        path = options["path"]
        dry_run = options["dry_run"]

        try:
            with open(path, encoding="utf-8") as handle:
                payload = json.load(handle)
        except OSError as e:
            raise CommandError(f"Cannot read {path}: {e}")
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON in {path}: {e}")

        campaigns = payload if isinstance(payload, list) else [payload]

        self.stdout.write(self.style.WARNING(f"Importing {len(campaigns)} campaign(s)..."))

        failures = 0
        for position, data in enumerate(campaigns, start=1):
            if not isinstance(data, dict):
                failures += 1
                self.stdout.write(self.style.ERROR(f"✗ Entry {position}: not a JSON object"))
                continue

            name = data.get("name") or f"entry {position}"
            instance = DiscountSet.objects.filter(name=data.get("name")).first()
            serializer = DiscountSetSerializer(instance, data=data)

            if not serializer.is_valid():
                failures += 1
                self.stdout.write(self.style.ERROR(f"✗ {name}: {serializer.errors}"))
                continue

            if dry_run:
                self.stdout.write(self.style.SUCCESS(f"✓ {name}: valid"))
                continue

            serializer.save()
            action = "updated" if instance is not None else "created"
            self.stdout.write(self.style.SUCCESS(f"✓ {name}: {action}"))

        if failures:
            raise CommandError(f"{failures} campaign(s) rejected")

        self.stdout.write(self.style.SUCCESS("Import complete"))
