from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import Role, User


ROLE_LEVELS = {
    Role.Name.ADMIN: Role.Level.ADMIN,
    Role.Name.WORKER: Role.Level.WORKER,
    Role.Name.PROJECT_OWNER: Role.Level.PROJECT_OWNER,
}


class Command(BaseCommand):
    help = "Ensure roles exist and create the default admin user if it is missing."

    def add_arguments(self, parser):
        parser.add_argument("--username", default=None)
        parser.add_argument("--password", default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        for name, level in ROLE_LEVELS.items():
            role, _ = Role.objects.get_or_create(name=name, defaults={"level": level})
            if role.level != level:
                role.level = level
                role.save(update_fields=["level"])

        username = options["username"] or settings.DEFAULT_ADMIN_USERNAME
        password = options["password"] or settings.DEFAULT_ADMIN_PASSWORD

        if User.objects.filter(username=username).exists():
            self.stdout.write(f"Admin user '{username}' already exists.")
            return

        User.objects.create_superuser(username=username, password=password)
        self.stdout.write(self.style.SUCCESS(f"Admin user created: username={username}"))
