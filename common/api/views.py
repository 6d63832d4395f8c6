import logging
from decimal import Decimal

from django.db.models import Avg, Count, Q, Sum
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework import status

from applications.models import Application
from common.roles import user_profile
from profiles.models import Profile, TaskerProfile
from reviews.models import Review
from tasks.models import Task

logger = logging.getLogger(__name__)

CUSTOMER_ACTIVE = (Task.Status.DRAFT, Task.Status.OPEN, Task.Status.ASSIGNED, Task.Status.IN_PROGRESS)
TASKER_ACTIVE = (Task.Status.ASSIGNED, Task.Status.IN_PROGRESS)


def _money(value) -> str:
    return str((value or Decimal("0")).quantize(Decimal("0.01")))


class BaseInfoAPIView(APIView):
    """
    GET /api/base-info/

    Returns platform-wide aggregate statistics:
    - review_count: number of visible reviews
    - average_rating: average rating across visible reviews (rounded to 1 decimal)
    - tasker_count: number of profiles that can take on tasks
    - open_task_count: tasks currently accepting applications
    - completed_task_count: tasks that have been completed

    Authentication: none
    Permissions: AllowAny
    """

    authentication_classes = []          # No authentication required
    permission_classes = [AllowAny]      # Explicitly allow public access

    def get(self, request):
        """
        Compute and return the aggregate counters. If there are no reviews,
        average_rating is 0.0 (not null).
        """
        try:
            reviews = Review.objects.filter(is_visible=True).aggregate(
                count=Count("id"), avg=Avg("rating")
            )
            tasks = Task.objects.aggregate(
                open=Count("id", filter=Q(status=Task.Status.OPEN)),
                completed=Count("id", filter=Q(status=Task.Status.COMPLETED)),
            )
            data = {
                "review_count": reviews["count"],
                "average_rating": round(float(reviews["avg"] or 0.0), 1),
                "tasker_count": Profile.objects.filter(
                    role__in=(Profile.Role.TASKER, Profile.Role.BOTH)
                ).count(),
                "open_task_count": tasks["open"],
                "completed_task_count": tasks["completed"],
            }
            return Response(data, status=status.HTTP_200_OK)
        except Exception:
            logger.exception("base-info aggregation failed")
            return Response(
                {"detail": "Internal Server Error"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )


class DashboardAPIView(APIView):
    """
    GET /api/dashboard/

    Personal counters for the caller. A customer gets a `customer` block, a
    tasker a `tasker` block, a user with role `both` gets both. Amounts are
    task prices of completed tasks, as decimal strings.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        prof = user_profile(request.user)
        data = {"role": prof.role if prof else ""}

        if prof and prof.is_customer:
            data["customer"] = self._customer_block(request.user)
        if prof and prof.is_tasker:
            data["tasker"] = self._tasker_block(request.user, prof)
        return Response(data, status=status.HTTP_200_OK)

    def _customer_block(self, user):
        stats = Task.objects.filter(customer=user).aggregate(
            active=Count("id", filter=Q(status__in=CUSTOMER_ACTIVE)),
            completed=Count("id", filter=Q(status=Task.Status.COMPLETED)),
            spent=Sum("price", filter=Q(status=Task.Status.COMPLETED)),
        )
        return {
            "active_tasks": stats["active"],
            "completed_tasks": stats["completed"],
            "total_spent": _money(stats["spent"]),
        }

    def _tasker_block(self, user, prof):
        stats = Task.objects.filter(tasker=user).aggregate(
            active=Count("id", filter=Q(status__in=TASKER_ACTIVE)),
            completed=Count("id", filter=Q(status=Task.Status.COMPLETED)),
            earned=Sum("price", filter=Q(status=Task.Status.COMPLETED)),
        )
        pending = Application.objects.filter(
            tasker=user, status=Application.Status.PENDING
        ).count()
        rating = (
            TaskerProfile.objects.filter(profile=prof).values_list("rating", flat=True).first()
        )
        return {
            "active_jobs": stats["active"],
            "completed_jobs": stats["completed"],
            "total_earnings": _money(stats["earned"]),
            "pending_applications": pending,
            "rating": float(rating or 0),
        }
