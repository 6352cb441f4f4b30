from rest_framework import serializers

from .models import Worker


class WorkerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Worker
        fields = (
            "id",
            "name",
            "phone",
            "email",
            "role",
            "address",
            "daily_salary",
            "monthly_salary",
            "pending_salary",
            "payment_status",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("pending_salary", "payment_status", "created_at", "updated_at")

    def validate_phone(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Phone is required.")
        return value

    def validate_name(self, value):
        return value.strip()


class WorkerListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
