"""
Storefront User Serializers

Serializers:
- RegistrationSerializer: Self-service sign-up as CUSTOMER
- LoginSerializer: Email/password credential check

Author: Storefront Development Team
Version: 1.0.0
"""

from typing import Any, Dict

from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from core.exceptions import InvalidCredentials

from .identity import Role


class RegistrationSerializer(serializers.Serializer):
    """
    Registers a new customer. The email doubles as the Django username.

    Request Body Example (JSON):
    {
        "name": "Maria Silva",
        "email": "maria@example.com",
        "password": "secret123"
    }
    """

    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)

    def validate_email(self, value: str) -> str:
        email = value.lower()
        if User.objects.filter(username=email).exists():
            raise serializers.ValidationError(_("This email is already registered."))
        return email

    def create(self, validated_data: Dict[str, Any]) -> User:
        with transaction.atomic():
            user = User.objects.create_user(
                username=validated_data["email"],
                email=validated_data["email"],
                password=validated_data["password"],
                first_name=validated_data["name"],
            )
            # The profile was created by the post_save signal and is cached on the user.
            user.profile.role = Role.CUSTOMER
            user.profile.save(update_fields=["role"])
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        user = authenticate(
            request=self.context.get("request"),
            username=attrs["email"].lower(),
            password=attrs["password"],
        )
        if user is None:
            raise InvalidCredentials()
        attrs["user"] = user
        return attrs

