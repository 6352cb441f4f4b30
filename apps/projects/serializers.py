from rest_framework import serializers

from apps.salaries.models import PaymentMethod
from apps.workers.models import Worker

from .models import Project, ProjectOwner


class ProjectOwnerSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectOwner
        fields = (
            "id",
            "name",
            "email",
            "phone",
            "address",
            "company",
            "total_project_value",
            "paid_amount",
            "balance_amount",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("paid_amount", "balance_amount", "created_at", "updated_at")

    def validate_email(self, value):
        value = value.strip().lower()
        qs = ProjectOwner.objects.filter(email__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Project owner with this email already exists.")
        return value

    def validate_phone(self, value):
        return value.strip()


class ProjectOwnerOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectOwner
        fields = ("id", "name", "company", "email")


class AssignedWorkerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Worker
        fields = ("id", "name", "role", "phone", "daily_salary")


class ProjectSerializer(serializers.ModelSerializer):
    owner_name = serializers.CharField(source="owner.name", read_only=True)
    assigned_workers = serializers.PrimaryKeyRelatedField(
        queryset=Worker.objects.all(),
        many=True,
        required=False,
    )

    class Meta:
        model = Project
        fields = (
            "id",
            "name",
            "description",
            "owner",
            "owner_name",
            "status",
            "total_amount",
            "paid_amount",
            "pending_amount",
            "current_balance",
            "assigned_workers",
            "start_date",
            "end_date",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("paid_amount", "pending_amount", "current_balance", "created_at", "updated_at")

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must not be before start date."})
        return attrs


class ProjectSummarySerializer(serializers.ModelSerializer):
    assigned_workers = AssignedWorkerSerializer(many=True, read_only=True)

    class Meta:
        model = Project
        fields = (
            "id",
            "name",
            "status",
            "total_amount",
            "paid_amount",
            "pending_amount",
            "current_balance",
            "assigned_workers",
            "start_date",
            "end_date",
        )


class ProjectListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Project.Status.choices, required=False)
    owner_id = serializers.IntegerField(required=False, min_value=1)


class OwnerProjectsQuerySerializer(serializers.Serializer):
    SORT_FIELDS = ("name", "-name", "status", "created_at", "-created_at", "total_amount", "-total_amount")

    sort = serializers.ChoiceField(choices=SORT_FIELDS, required=False, default="name")


class ProcessPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False, default=PaymentMethod.CASH)
    reference = serializers.CharField(required=False, allow_blank=True, max_length=120)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True)
    is_advance = serializers.BooleanField(required=False, default=False)


class AssignWorkersSerializer(serializers.Serializer):
    worker_ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)

    def validate_worker_ids(self, value):
        ids = list(dict.fromkeys(value))
        found = set(Worker.objects.filter(id__in=ids).values_list("id", flat=True))
        missing = [worker_id for worker_id in ids if worker_id not in found]
        if missing:
            raise serializers.ValidationError(f"Workers not found: {missing}.")
        return ids
