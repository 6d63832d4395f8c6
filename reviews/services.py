"""Rating aggregates.

TaskerProfile keeps a denormalised average rating and review count. They are
recomputed from the visible reviews whenever a review about that user is
created, changed or deleted.
"""

from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Avg, Count, Q

from profiles.models import TaskerProfile
from reviews.models import Review


def refresh_tasker_rating(user_id: int) -> None:
    """Recompute rating/total_reviews for the user's tasker profile, if any."""
    stats = Review.objects.filter(reviewed_id=user_id, is_visible=True).aggregate(
        avg=Avg("rating"), total=Count("id")
    )
    avg = Decimal(str(stats["avg"] or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    TaskerProfile.objects.filter(profile__user_id=user_id).update(
        rating=avg, total_reviews=stats["total"]
    )


def rating_summary(user_id: int) -> dict:
    """Review count, rounded average and per-star counts of visible reviews about a user."""
    qs = Review.objects.filter(reviewed_id=user_id, is_visible=True)
    stats = qs.aggregate(
        total=Count("id"),
        avg=Avg("rating"),
        **{f"s{n}": Count("id", filter=Q(rating=n)) for n in range(1, 6)},
    )
    return {
        "total_reviews": stats["total"],
        "average_rating": round(float(stats["avg"] or 0.0), 1),
        "five_star_count": stats["s5"],
        "four_star_count": stats["s4"],
        "three_star_count": stats["s3"],
        "two_star_count": stats["s2"],
        "one_star_count": stats["s1"],
    }
