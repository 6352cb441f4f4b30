from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed("User is inactive")
        data["user"] = {
            "id": self.user.id,
            "username": self.user.username,
            "role": self.user.role_name,
            "worker": self.user.worker_id,
            "project_owner": self.user.project_owner_id,
        }
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role_name
        token["username"] = user.username
        return token
