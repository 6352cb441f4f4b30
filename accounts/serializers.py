from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from apps.projects.models import ProjectOwner
from apps.workers.models import Worker

from .models import Role, User


class UserSerializer(serializers.ModelSerializer):
    role = serializers.CharField(source="role.name", read_only=True)
    role_level = serializers.IntegerField(source="role.level", read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "first_name",
            "last_name",
            "email",
            "phone",
            "role",
            "role_level",
            "worker",
            "project_owner",
            "is_active",
        )


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=Role.Name.choices, required=False, default=Role.Name.WORKER)
    worker = serializers.PrimaryKeyRelatedField(queryset=Worker.objects.all(), required=False, allow_null=True)
    project_owner = serializers.PrimaryKeyRelatedField(
        queryset=ProjectOwner.objects.all(),
        required=False,
        allow_null=True,
    )
    email = serializers.EmailField(required=False, allow_blank=True)
    first_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    last_name = serializers.CharField(required=False, allow_blank=True, max_length=150)

    def validate_username(self, value):
        value = value.strip()
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("User already exists.")
        return value

    def validate_password(self, value):
        validate_password(value)
        return value

    def validate(self, attrs):
        role = attrs.get("role")
        worker = attrs.get("worker")
        if role == Role.Name.WORKER and worker and User.objects.filter(worker=worker).exists():
            raise serializers.ValidationError({"worker": "Worker already has a login."})
        if role == Role.Name.PROJECT_OWNER and not attrs.get("project_owner"):
            raise serializers.ValidationError({"project_owner": "Project owner login needs a linked project owner."})
        return attrs

    def create(self, validated_data):
        role_name = validated_data.pop("role")
        role, _ = Role.objects.get_or_create(
            name=role_name,
            defaults={"level": Role.Level[role_name]},
        )
        password = validated_data.pop("password")
        user = User(role=role, **validated_data)
        if role_name == Role.Name.ADMIN:
            user.is_staff = True
        user.set_password(password)
        user.save()
        return user
