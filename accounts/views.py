from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.audit import AuditEvents, client_ip, log_event

from .access_policy import AccessPolicy
from .models import Role, User
from .serializers import LoginSerializer, RegisterSerializer, UserSerializer
from .throttles import LoginRateThrottle
from .tokens import CustomTokenObtainPairSerializer


def _token_pair(user) -> dict:
    refresh = CustomTokenObtainPairSerializer.get_token(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class LoginView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [LoginRateThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"detail": "Username and password are required."}, status=status.HTTP_400_BAD_REQUEST)

        username = serializer.validated_data["username"].strip()
        user = authenticate(username=username, password=serializer.validated_data["password"])

        if not user:
            existing_user = User.objects.filter(username=username).first()
            log_event(
                action=AuditEvents.LOGIN_FAILED,
                actor=existing_user,
                object_type="user",
                object_id=str(existing_user.id) if existing_user else "",
                level="warning",
                category="auth",
                ip_address=client_ip(request),
                metadata={"username": username},
            )
            return Response({"detail": "Invalid credentials."}, status=status.HTTP_401_UNAUTHORIZED)

        log_event(
            action=AuditEvents.LOGIN_SUCCESS,
            actor=user,
            object_type="user",
            object_id=str(user.id),
            level="info",
            category="auth",
            ip_address=client_ip(request),
        )
        return Response({**_token_pair(user), "user": UserSerializer(user).data})


class RegisterView(APIView):
    """
    Open while no user exists so the first admin can bootstrap the system,
    admin-only afterwards.
    """

    def get_permissions(self):
        if not User.objects.exists():
            return [AllowAny()]
        return [IsAuthenticated()]

    def post(self, request):
        bootstrap = not User.objects.exists()
        if not bootstrap and not AccessPolicy.can_register_users(request.user):
            return Response({"detail": "Admin role required."}, status=status.HTTP_403_FORBIDDEN)

        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        # The very first account is always an admin.
        user = serializer.save(role=Role.Name.ADMIN) if bootstrap else serializer.save()

        actor = request.user if request.user.is_authenticated else user
        log_event(
            action=AuditEvents.USER_REGISTERED,
            actor=actor,
            object_type="user",
            object_id=str(user.id),
            level="info",
            category="user",
            ip_address=client_ip(request),
            metadata={"username": user.username, "role": user.role_name},
        )
        return Response({**_token_pair(user), "user": UserSerializer(user).data}, status=status.HTTP_201_CREATED)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)
