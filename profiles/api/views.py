"""Profiles API views.

Provides endpoints to retrieve a single profile (by user id) and to update the
owner's own profile, to read and maintain the tasker extension, and to list
tasker and customer profiles. Verification documents are uploaded, listed and
deleted by their owner. Authentication is required for all endpoints; write
access is limited to the profile owner.
"""

import logging

from django.core.files.storage import default_storage
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.parsers import JSONParser, FormParser, MultiPartParser

from ..models import Profile, ProfileDocument, TaskerProfile
from .serializers import (
    ProfileDetailSerializer,
    ProfilePatchSerializer,
    TaskerProfileSerializer,
    TaskerProfileListSerializer,
    CustomerProfileListSerializer,
    ProfileDocumentSerializer,
    ProfileDocumentUploadSerializer,
)
from .permissions import IsDocumentOwner, IsProfileOwner, IsTaskerCapable

logger = logging.getLogger(__name__)

TASKER_ROLES = (Profile.Role.TASKER, Profile.Role.BOTH)
CUSTOMER_ROLES = (Profile.Role.CUSTOMER, Profile.Role.BOTH)


def _own_profile(user) -> Profile:
    profile, _ = Profile.objects.get_or_create(user=user)
    return profile


class ProfileView(generics.RetrieveUpdateAPIView):
    """
    API endpoint for retrieving or partially updating a single profile.

    - GET `/api/profile/{pk}/` returns the profile for the given user id (`pk`).
      Contact details and preferences are only included for the owner.
    - PATCH `/api/profile/{pk}/` updates only the fields provided and is restricted
      to the owner of the profile (the authenticated user with id `pk`).

    Notes:
    - On PATCH, if the profile does not exist for the owner yet, a new profile is
      lazily created for that user.
    - The owner is inferred from the authenticated request and never taken from
      the payload.
    """

    queryset = Profile.objects.select_related("user")
    serializer_class = ProfileDetailSerializer
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = (JSONParser, FormParser, MultiPartParser)
    http_method_names = ["get", "patch", "head", "options"]

    def get_permissions(self):
        """Require ownership for PATCH; otherwise authentication only."""
        if self.request.method == "PATCH":
            return [IsAuthenticated(), IsProfileOwner()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        """Use the patch serializer for PATCH; the detail serializer otherwise."""
        if self.request.method == "PATCH":
            return ProfilePatchSerializer
        return ProfileDetailSerializer

    def get_object(self):
        """
        Return the profile by user id.

        - For PATCH: ensure the authenticated user matches the path `pk`.
          If the profile does not exist for the owner, lazily create it before
          applying object-level permission checks.
        - For GET: fetch the profile by user id or return 404 if it does not exist.
        """
        user_id = int(self.kwargs["pk"])

        if self.request.method == "PATCH":
            if self.request.user.id != user_id:
                raise PermissionDenied(
                    "You are only allowed to update your own profile."
                )
            obj = _own_profile(self.request.user)
            self.check_object_permissions(self.request, obj)
            return obj

        return get_object_or_404(self.queryset, user_id=user_id)


class TaskerProfileView(generics.RetrieveUpdateAPIView):
    """
    API endpoint for the tasker extension of a profile.

    - GET `/api/profile/{pk}/tasker/` returns it, or 404 if the user has none yet.
    - PUT/PATCH create it on first save and update it afterwards. Owner-only and
      only for users whose role allows tasking.
    """

    serializer_class = TaskerProfileSerializer
    permission_classes = [IsAuthenticated, IsTaskerCapable]

    def get_object(self):
        user_id = int(self.kwargs["pk"])
        if self.request.method in ("PUT", "PATCH"):
            if self.request.user.id != user_id:
                raise PermissionDenied("You are only allowed to update your own tasker profile.")
            tasker_profile, created = TaskerProfile.objects.get_or_create(
                profile=_own_profile(self.request.user)
            )
            if created:
                logger.info("Tasker profile created for user %s", user_id)
            return tasker_profile
        return get_object_or_404(
            TaskerProfile.objects.select_related("profile"), profile__user_id=user_id
        )

    def update(self, request, *args, **kwargs):
        """PUT and PATCH both behave as partial updates (all fields have defaults)."""
        kwargs["partial"] = True
        return super().update(request, *args, **kwargs)


class TaskerProfileListView(generics.ListAPIView):
    """
    API endpoint for listing tasker profiles.

    - GET `/api/profiles/tasker/` returns profiles with role tasker or both.
    - `skill` matches case-insensitively inside the skills list,
      `verified=true|false` filters on an approved verification.
    """

    serializer_class = TaskerProfileListSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        """Return tasker profiles only (prefetching user and extension)."""
        qs = (
            Profile.objects.select_related("user", "tasker_profile")
            .filter(role__in=TASKER_ROLES)
            .order_by("-created_at", "-id")
        )
        params = self.request.query_params

        skill = (params.get("skill") or "").strip()
        if skill:
            qs = qs.filter(tasker_profile__skills__icontains=skill)

        verified = params.get("verified")
        if verified:
            if verified not in ("true", "false"):
                raise ValidationError({"verified": "Allowed values: true, false."})
            approved = TaskerProfile.VerificationStatus.APPROVED
            if verified == "true":
                qs = qs.filter(tasker_profile__verification_status=approved)
            else:
                qs = qs.exclude(tasker_profile__verification_status=approved)
        return qs


class CustomerProfileListView(generics.ListAPIView):
    """
    API endpoint for listing all customer profiles.

    - GET `/api/profiles/customer/` returns profiles with role customer or both.
    - Authentication is required.
    """

    serializer_class = CustomerProfileListSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        """Return customer profiles only (prefetching user for efficiency)."""
        return (
            Profile.objects.select_related("user")
            .filter(role__in=CUSTOMER_ROLES)
            .order_by("-created_at", "-id")
        )


class ProfileDocumentListCreateView(generics.ListCreateAPIView):
    """GET: the caller's own documents. POST: multipart upload `{document_type, file}`."""

    permission_classes = [IsAuthenticated]
    parser_classes = (MultiPartParser, FormParser)
    pagination_class = None

    def get_serializer_class(self):
        if self.request.method == "POST":
            return ProfileDocumentUploadSerializer
        return ProfileDocumentSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if self.request.method == "POST":
            context["profile"] = _own_profile(self.request.user)
        return context

    def get_queryset(self):
        return ProfileDocument.objects.filter(profile__user=self.request.user)

    def perform_create(self, serializer):
        document = serializer.save()
        logger.info("Document %s (%s) uploaded by user %s", document.pk, document.document_type, self.request.user.pk)


class ProfileDocumentDeleteView(generics.DestroyAPIView):
    """DELETE `/api/profile/documents/{id}/` removes the stored file and the row."""

    permission_classes = [IsAuthenticated, IsDocumentOwner]
    queryset = ProfileDocument.objects.select_related("profile")

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        if instance.storage_path:
            default_storage.delete(instance.storage_path)
        instance.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
