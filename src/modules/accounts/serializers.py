from __future__ import annotations

from rest_framework import serializers

from modules.accounts.models import Address, User


class UserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "mobile",
            "first_name",
            "family_name",
            "full_name",
            "role",
            "emirate",
            "preferred_language",
            "is_active",
            "is_verified",
            "last_login_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UserSummarySerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "full_name", "mobile", "role"]
        read_only_fields = fields


class DriverSerializer(UserSummarySerializer):
    active_deliveries = serializers.IntegerField(read_only=True, default=0)

    class Meta(UserSummarySerializer.Meta):
        fields = UserSummarySerializer.Meta.fields + ["email", "is_active", "active_deliveries"]
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    first_name = serializers.CharField(max_length=100)
    family_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    mobile = serializers.CharField(max_length=20)
    emirate = serializers.CharField(required=False, allow_blank=True)


class AdminCreateUserSerializer(RegisterSerializer):
    role = serializers.ChoiceField(choices=User._meta.get_field("role").choices)


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True)


class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = [
            "id",
            "label",
            "full_name",
            "mobile",
            "emirate",
            "area",
            "street",
            "building",
            "floor",
            "apartment",
            "latitude",
            "longitude",
            "is_default",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
