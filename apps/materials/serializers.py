from rest_framework import serializers

from .models import Material


class MaterialSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source="project.name", read_only=True)

    class Meta:
        model = Material
        fields = (
            "id",
            "name",
            "category",
            "quantity",
            "unit_price",
            "total_cost",
            "quality",
            "supplier",
            "project",
            "project_name",
            "purchase_date",
            "notes",
            "ledger_posted",
            "posted_amount",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("total_cost", "ledger_posted", "posted_amount", "created_at", "updated_at")


class MaterialListQuerySerializer(serializers.Serializer):
    project_id = serializers.IntegerField(required=False, min_value=1)
    category = serializers.CharField(required=False, allow_blank=True)
