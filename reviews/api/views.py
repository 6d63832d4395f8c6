"""Reviews API views.

List and create reviews on the same endpoint (auth required). Supports filtering
by task_id, reviewer_id and reviewed_id and ordering by created_at or rating.
Retrieve/patch/delete a single review: the reviewer edits rating/comment or
deletes, the reviewed user answers once. A per-user rating summary is public
to authenticated users.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.roles import display_name, user_role
from reviews.models import Review
from reviews.services import rating_summary, refresh_tasker_rating
from .permissions import IsReviewOwner, IsReviewParticipant
from .serializers import (
    ReviewCreateSerializer,
    ReviewOutputSerializer,
    ReviewPatchSerializer,
    ReviewResponseSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


# ----------------------------- helpers (module-level) -----------------------------

def _apply_filters_and_ordering(qs, params):
    """Filter by ids and apply ordering; raises ValidationError on bad input."""
    for key in ("task_id", "reviewer_id", "reviewed_id"):
        v = params.get(key)
        if v:
            if not v.isdigit():
                raise ValidationError({key: "Must be an integer."})
            qs = qs.filter(**{key: int(v)})

    ordering = params.get("ordering")
    if ordering:
        allowed = {"created_at", "-created_at", "rating", "-rating"}
        if ordering not in allowed:
            raise ValidationError(
                {"ordering": "Allowed values: created_at, -created_at, rating, -rating."}
            )
        qs = qs.order_by(ordering, "-id")
    else:
        qs = qs.order_by("-created_at", "-id")

    return qs


def _validate_patch_fields(data, allowed: set):
    """Return Response(400) if fields outside `allowed` are present."""
    extra = set(data.keys()) - allowed
    if extra:
        return Response(
            {
                "detail": (
                    f"Only {', '.join(repr(f) for f in sorted(allowed))} may be updated. "
                    f"Invalid: {', '.join(sorted(extra))}."
                )
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    return None


# --------------------------------------- views ---------------------------------------

class ReviewListCreateAPIView(generics.ListCreateAPIView):
    """GET: list reviews (filter/order). POST: review the other party of a completed task."""

    queryset = Review.objects.filter(is_visible=True).select_related(
        "reviewer__profile", "reviewed__profile"
    )
    permission_classes = [IsAuthenticated]
    pagination_class = None

    def get_serializer_class(self):
        """Use output serializer for GET and create serializer for POST."""
        return ReviewOutputSerializer if self.request.method == "GET" else ReviewCreateSerializer

    # --- GET ---
    def get_queryset(self):
        """Apply optional filters and ordering from query parameters."""
        return _apply_filters_and_ordering(super().get_queryset(), self.request.query_params)

    # --- POST ---
    def create(self, request, *args, **kwargs):
        """Validate and create a review; return the created representation."""
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                review = ser.save()
                refresh_tasker_rating(review.reviewed_id)
        except IntegrityError:
            raise ValidationError({"non_field_errors": ["You have already reviewed this task."]})

        logger.info(
            "Review %s created for task %s: user %s rated user %s with %s",
            review.pk, review.task_id, review.reviewer_id, review.reviewed_id, review.rating,
        )
        return Response(ReviewOutputSerializer(review).data, status=status.HTTP_201_CREATED)


class ReviewDetailUpdateDeleteAPIView(generics.RetrieveUpdateDestroyAPIView):
    """PATCH: reviewer edits rating/comment, reviewed user responds. DELETE: reviewer only."""

    queryset = Review.objects.all().select_related("reviewer__profile", "reviewed__profile")

    def get_permissions(self):
        if self.request.method == "DELETE":
            return [IsAuthenticated(), IsReviewOwner()]
        if self.request.method in ("PATCH", "PUT"):
            return [IsAuthenticated(), IsReviewParticipant()]
        return [IsAuthenticated()]

    def get_serializer_class(self):
        """Pick the patch serializer by who is editing; output serializer otherwise."""
        if self.request.method in ("PATCH", "PUT"):
            if self.get_object().reviewer_id == self.request.user.id:
                return ReviewPatchSerializer
            return ReviewResponseSerializer
        return ReviewOutputSerializer

    def partial_update(self, request, *args, **kwargs):
        """Apply the caller's allowed fields and return the full review."""
        instance = self.get_object()
        if instance.reviewer_id == request.user.id:
            allowed = {"rating", "comment"}
        else:
            allowed = {"response"}
        bad = _validate_patch_fields(request.data, allowed)
        if bad is not None:
            return bad

        ser = self.get_serializer(instance, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            self.perform_update(ser)
            refresh_tasker_rating(instance.reviewed_id)
        return Response(ReviewOutputSerializer(instance).data, status=status.HTTP_200_OK)

    def update(self, request, *args, **kwargs):
        """Force partial updates via PATCH semantics."""
        kwargs["partial"] = True
        return self.partial_update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        """Delete the review (reviewer-only) and return 204 No Content."""
        instance = self.get_object()
        reviewed_id = instance.reviewed_id
        with transaction.atomic():
            self.perform_destroy(instance)
            refresh_tasker_rating(reviewed_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RatingSummaryAPIView(APIView):
    """GET /api/rating-summary/{user_id}/ -> review totals and star distribution."""

    permission_classes = [IsAuthenticated]

    def get(self, request, user_id: int):
        user = get_object_or_404(User.objects.select_related("profile"), pk=user_id)
        data = {
            "user_id": user.id,
            "full_name": display_name(user),
            "role": user_role(user),
        }
        data.update(rating_summary(user.id))
        return Response(data, status=status.HTTP_200_OK)
