from rest_framework import serializers

from common.serializers import RecordFilterQuerySerializer

from .models import Attendance


class AttendanceSerializer(serializers.ModelSerializer):
    worker_name = serializers.CharField(source="worker.name", read_only=True)
    project_name = serializers.CharField(source="project.name", read_only=True)

    class Meta:
        model = Attendance
        fields = (
            "id",
            "date",
            "worker",
            "worker_name",
            "project",
            "project_name",
            "status",
            "overtime_hours",
            "notes",
            "earned_amount",
            "ledger_posted",
            "posted_amount",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("earned_amount", "ledger_posted", "posted_amount", "created_at", "updated_at")
        # The (worker, date) check lives in the view so duplicates get one message.
        validators = []


class AttendanceReportQuerySerializer(RecordFilterQuerySerializer):
    GROUP_BY = ("date", "worker", "project")

    start_date = serializers.DateField()
    end_date = serializers.DateField()
    group_by = serializers.ChoiceField(choices=GROUP_BY, required=False, default="date")
