from rest_framework import serializers

from vibesync.users.models import User


class UserSerializer(serializers.ModelSerializer[User]):
    full_name = serializers.CharField(source="display_name", read_only=True)
    id = serializers.IntegerField(read_only=True)

    # Identity fields are managed through the auth endpoints, not here
    username = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "user_type",
            "profile_image_url",
            "language",
        ]
