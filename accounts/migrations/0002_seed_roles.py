from django.db import migrations


ROLES = (
    ("ADMIN", 30, "Firm administrator"),
    ("WORKER", 20, "Worker with access to own attendance and salaries"),
    ("PROJECT_OWNER", 10, "Client with access to own projects and payments"),
)


def forwards(apps, schema_editor):
    Role = apps.get_model("accounts", "Role")
    for name, level, description in ROLES:
        Role.objects.update_or_create(name=name, defaults={"level": level, "description": description})


class Migration(migrations.Migration):

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(forwards, migrations.RunPython.noop),
    ]
