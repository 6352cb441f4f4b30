from rest_framework import serializers

from .models import Salary


class SalarySerializer(serializers.ModelSerializer):
    worker_name = serializers.CharField(source="worker.name", read_only=True)
    project_name = serializers.SerializerMethodField()

    class Meta:
        model = Salary
        fields = (
            "id",
            "worker",
            "worker_name",
            "project",
            "project_name",
            "amount",
            "date",
            "payment_method",
            "period_start",
            "period_end",
            "notes",
            "ledger_posted",
            "posted_amount",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("ledger_posted", "posted_amount", "created_at", "updated_at")

    def get_project_name(self, obj):
        return obj.project.name if obj.project_id else None

    def validate(self, attrs):
        start = attrs.get("period_start", getattr(self.instance, "period_start", None))
        end = attrs.get("period_end", getattr(self.instance, "period_end", None))
        if start and end and end < start:
            raise serializers.ValidationError({"period_end": "Period end must not be before period start."})
        return attrs
