"""Profiles API serializers.

Contains serializers for:
- reading a profile (private fields only for the owner),
- partially updating a profile (owner-only, avatar upload or URL),
- reading and writing the tasker extension,
- listing tasker and customer profiles,
- uploading and listing verification documents.

Serializers ensure certain string fields never return `null` in responses, but
empty strings instead.
"""

import os
import uuid
from django.conf import settings
from django.core.files.storage import default_storage
from django.contrib.auth import get_user_model
from rest_framework import serializers
from ..models import Profile, ProfileDocument, TaskerProfile

User = get_user_model()

AVATAR_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp"}
DOCUMENT_CONTENT_TYPES = {"application/pdf", "image/jpeg", "image/png", "image/webp"}
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


# ------------------------------ helpers ------------------------------

def _upload_path(folder: str, user_id: int, filename: str, default_ext: str) -> str:
    base, ext = os.path.splitext(filename or "")
    ext = (ext or default_ext).lower()
    return f"{folder}/{user_id}/{uuid.uuid4().hex}{ext}"


def _is_uploaded_file(obj) -> bool:
    return hasattr(obj, "read")


def _abs_url(request, relative_url: str) -> str:
    if not relative_url:
        return ""
    return request.build_absolute_uri(relative_url) if request else relative_url


def _store(request, file_obj, path: str):
    """Save `file_obj` to default storage; return (storage path, absolute URL)."""
    saved_path = default_storage.save(path, file_obj)
    return saved_path, _abs_url(request, default_storage.url(saved_path))


def _upload_error(file_obj, allowed_types: set, max_bytes: int, label: str):
    """Return an error message for a disallowed upload, or None."""
    ctype = (getattr(file_obj, "content_type", "") or "").lower()
    if ctype not in allowed_types:
        return f"Unsupported file type. Allowed: {label}"
    if getattr(file_obj, "size", 0) > max_bytes:
        return f"File too large (>{max_bytes // (1024 * 1024)}MB)."
    return None


def _save_avatar_and_get_url(request, file_obj) -> str:
    """Store an already validated avatar image and return its absolute URL."""
    path = _upload_path("avatars", request.user.id, getattr(file_obj, "name", "avatar"), ".jpg")
    _, url = _store(request, file_obj, path)
    return url


def _apply_user_updates(user, data: dict):
    for attr, val in data.items():
        setattr(user, attr, val if val is not None else "")
    if data:
        user.save(update_fields=list(data.keys()))


def _coalesce_fields(data: dict, keys: set):
    for k in keys:
        if k in data and data[k] is None:
            data[k] = ""


# ------------------------------ custom field ------------------------------

class FileOrURLField(serializers.Field):
    """
    Accepts EITHER an UploadedFile (multipart) OR a string URL (JSON).
    Representation is always a (possibly empty) string.
    """

    def to_internal_value(self, data):
        if _is_uploaded_file(data):                # upload
            return data
        if data in (None, ""):                     # empty/None -> empty string
            return ""
        if isinstance(data, str):                  # URL string
            return data
        raise serializers.ValidationError(
            "avatar must be an uploaded image or a string URL."
        )

    def to_representation(self, value):
        return value or ""


# ------------------------------ profile ------------------------------

PROFILE_FIELDS = [
    "user",
    "username",
    "email",
    "first_name",
    "last_name",
    "role",
    "full_name",
    "phone",
    "avatar_url",
    "bio",
    "location_city",
    "location_state",
    "location_country",
    "date_of_birth",
    "notification_preferences",
    "has_tasker_profile",
    "created_at",
    "updated_at",
]

# Only the owner sees these.
PRIVATE_FIELDS = {"email", "phone", "date_of_birth", "notification_preferences"}


class ProfileDetailSerializer(serializers.ModelSerializer):
    """Read-only detail serializer (coalesces selected string fields to '')."""

    username = serializers.CharField(source="user.username", read_only=True)
    first_name = serializers.CharField(source="user.first_name", read_only=True)
    last_name = serializers.CharField(source="user.last_name", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    has_tasker_profile = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = PROFILE_FIELDS
        read_only_fields = fields

    _no_null = {"first_name", "last_name", "email", "full_name", "phone", "avatar_url", "bio"}

    def get_has_tasker_profile(self, obj):
        return TaskerProfile.objects.filter(profile=obj).exists()

    def to_representation(self, instance: Profile):
        data = super().to_representation(instance)
        _coalesce_fields(data, self._no_null)
        request = self.context.get("request")
        if not request or request.user.id != instance.user_id:
            for key in PRIVATE_FIELDS:
                data.pop(key, None)
        return data


class ProfilePatchSerializer(serializers.ModelSerializer):
    """
    Partial update of the caller's own profile.
    `avatar` accepts a multipart image upload OR a URL string and is stored
    in `avatar_url`.
    """

    avatar = FileOrURLField(required=False, write_only=True)
    first_name = serializers.CharField(
        source="user.first_name", required=False, allow_blank=True, allow_null=True
    )
    last_name = serializers.CharField(
        source="user.last_name", required=False, allow_blank=True, allow_null=True
    )
    email = serializers.EmailField(
        source="user.email", required=False, allow_blank=True, allow_null=True
    )
    role = serializers.ChoiceField(
        choices=[Profile.Role.CUSTOMER, Profile.Role.TASKER, Profile.Role.BOTH],
        required=False,
    )

    class Meta:
        model = Profile
        fields = [
            "first_name",
            "last_name",
            "email",
            "role",
            "full_name",
            "phone",
            "avatar",
            "bio",
            "location_city",
            "location_state",
            "location_country",
            "date_of_birth",
            "notification_preferences",
        ]
        extra_kwargs = {
            "full_name": {"required": False, "allow_blank": True, "allow_null": True},
            "phone": {"required": False, "allow_blank": True, "allow_null": True},
            "bio": {"required": False, "allow_blank": True, "allow_null": True},
            "location_city": {"required": False, "allow_blank": True, "allow_null": True},
            "location_state": {"required": False, "allow_blank": True, "allow_null": True},
            "location_country": {"required": False, "allow_blank": True, "allow_null": True},
        }

    def validate_avatar(self, value):
        if _is_uploaded_file(value):
            error = _upload_error(value, AVATAR_CONTENT_TYPES, settings.AVATAR_MAX_BYTES, "JPEG, PNG, WebP")
            if error:
                raise serializers.ValidationError(error)
        return value

    def validate_notification_preferences(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("notification_preferences must be an object.")
        return value

    def validate_email(self, value):
        if value:
            others = User.objects.filter(email__iexact=value)
            if self.instance is not None:
                others = others.exclude(pk=self.instance.user_id)
            if others.exists():
                raise serializers.ValidationError("Email already in use.")
        return value

    def validate_role(self, value):
        if self.instance is not None and self.instance.role == Profile.Role.ADMIN:
            raise serializers.ValidationError("Admin profiles cannot change their role.")
        return value

    def update(self, instance: Profile, validated_data):
        """Handle nested user fields, avatar upload/string, and normalize None -> ''."""
        request = self.context.get("request")
        _apply_user_updates(instance.user, validated_data.pop("user", {}))

        if "avatar" in validated_data:
            incoming = validated_data.pop("avatar")
            instance.avatar_url = (
                _save_avatar_and_get_url(request, incoming)
                if _is_uploaded_file(incoming)
                else (incoming or "")
            )

        for attr, val in validated_data.items():
            if val is None and attr != "date_of_birth":
                val = ""
            setattr(instance, attr, val)
        instance.save()
        return instance

    def to_representation(self, instance: Profile):
        return ProfileDetailSerializer(instance, context=self.context).data


# ------------------------------ tasker profile ------------------------------

class TaskerProfileSerializer(serializers.ModelSerializer):
    """Tasker extension; verification and counters are managed by the platform."""

    user = serializers.IntegerField(source="profile.user_id", read_only=True)
    hourly_rate = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )

    class Meta:
        model = TaskerProfile
        fields = [
            "user",
            "bio",
            "hourly_rate",
            "years_experience",
            "skills",
            "certifications",
            "availability",
            "emergency_contact_name",
            "emergency_contact_phone",
            "verification_status",
            "verified_at",
            "background_check_completed",
            "rating",
            "total_reviews",
            "total_tasks",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "user",
            "verification_status",
            "verified_at",
            "background_check_completed",
            "rating",
            "total_reviews",
            "total_tasks",
            "created_at",
            "updated_at",
        ]

    def _string_list(self, value, name):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError(f"{name} must be a list of strings.")
        return [v.strip() for v in value if v.strip()]

    def validate_skills(self, value):
        return self._string_list(value, "skills")

    def validate_certifications(self, value):
        return self._string_list(value, "certifications")

    def validate_availability(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("availability must be an object.")
        unknown = set(value) - set(WEEKDAYS)
        if unknown:
            raise serializers.ValidationError(f"Unknown day(s): {', '.join(sorted(unknown))}.")
        if not all(isinstance(v, bool) for v in value.values()):
            raise serializers.ValidationError("availability values must be true or false.")
        merged = {day: False for day in WEEKDAYS}
        if self.instance is not None and isinstance(self.instance.availability, dict):
            merged.update(self.instance.availability)
        merged.update(value)
        return merged


# ------------------------------ lists ------------------------------

class TaskerProfileListSerializer(serializers.ModelSerializer):
    """List serializer for taskers with their tasker extension (or null)."""

    username = serializers.CharField(source="user.username", read_only=True)
    tasker_profile = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = [
            "user",
            "username",
            "role",
            "full_name",
            "avatar_url",
            "bio",
            "location_city",
            "location_state",
            "tasker_profile",
        ]

    _no_null = {"full_name", "avatar_url", "bio", "location_city", "location_state"}

    def get_tasker_profile(self, obj):
        try:
            tp = obj.tasker_profile
        except TaskerProfile.DoesNotExist:
            return None
        return TaskerProfileSerializer(tp, context=self.context).data

    def to_representation(self, instance):
        data = super().to_representation(instance)
        _coalesce_fields(data, self._no_null)
        return data


class CustomerProfileListSerializer(serializers.ModelSerializer):
    """List serializer for customer profiles."""

    username = serializers.CharField(source="user.username", read_only=True)

    class Meta:
        model = Profile
        fields = [
            "user",
            "username",
            "role",
            "full_name",
            "avatar_url",
            "location_city",
            "created_at",
        ]

    _no_null = {"full_name", "avatar_url", "location_city"}

    def to_representation(self, instance):
        data = super().to_representation(instance)
        _coalesce_fields(data, self._no_null)
        return data


# ------------------------------ documents ------------------------------

class ProfileDocumentSerializer(serializers.ModelSerializer):
    """Read serializer for an uploaded verification document."""

    class Meta:
        model = ProfileDocument
        fields = ["id", "document_type", "document_name", "document_url", "verified", "uploaded_at"]
        read_only_fields = fields


class ProfileDocumentUploadSerializer(serializers.Serializer):
    """Multipart input `{document_type, file}`; stores the file under `documents/<user_id>/`."""

    document_type = serializers.ChoiceField(choices=ProfileDocument.DocumentType.choices)
    file = serializers.FileField()

    def validate_file(self, value):
        error = _upload_error(value, DOCUMENT_CONTENT_TYPES, settings.DOCUMENT_MAX_BYTES, "PDF, JPEG, PNG, WebP")
        if error:
            raise serializers.ValidationError(error)
        return value

    def create(self, validated_data):
        request = self.context["request"]
        profile = self.context["profile"]
        file_obj = validated_data["file"]
        name = getattr(file_obj, "name", "") or "document"
        path = _upload_path("documents", request.user.id, name, ".pdf")
        saved_path, url = _store(request, file_obj, path)
        return ProfileDocument.objects.create(
            profile=profile,
            document_type=validated_data["document_type"],
            document_name=os.path.basename(name)[:255],
            document_url=url,
            storage_path=saved_path,
        )

    def to_representation(self, instance):
        return ProfileDocumentSerializer(instance, context=self.context).data
