from rest_framework import serializers

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    project_name = serializers.SerializerMethodField()
    project_owner_name = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = (
            "id",
            "project",
            "project_name",
            "project_owner",
            "project_owner_name",
            "amount",
            "date",
            "payment_method",
            "reference",
            "description",
            "notes",
            "is_advance",
            "ledger_posted",
            "posted_amount",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("ledger_posted", "posted_amount", "created_at", "updated_at")

    def get_project_name(self, obj):
        return obj.project.name if obj.project_id else None

    def get_project_owner_name(self, obj):
        return obj.project_owner.name if obj.project_owner_id else None

    def validate(self, attrs):
        instance = self.instance
        project = attrs["project"] if "project" in attrs else getattr(instance, "project", None)
        owner = attrs["project_owner"] if "project_owner" in attrs else getattr(instance, "project_owner", None)

        if project is None and owner is None:
            raise serializers.ValidationError({"project": "Either project or project owner is required."})
        if project is not None and "project" in attrs and "project_owner" not in attrs:
            # Owner follows the project unless it is given explicitly.
            owner = project.owner
            attrs["project_owner"] = owner
        if project is not None and owner is not None and project.owner_id != owner.id:
            raise serializers.ValidationError({"project_owner": "Project owner does not own this project."})
        return attrs
