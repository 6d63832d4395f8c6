from django.urls import path
from .views import RatingSummaryAPIView, ReviewDetailUpdateDeleteAPIView, ReviewListCreateAPIView

urlpatterns = [
    path("reviews/", ReviewListCreateAPIView.as_view(), name="review-list"),
    path("reviews/<int:pk>/", ReviewDetailUpdateDeleteAPIView.as_view(), name="review-detail"),
    path("rating-summary/<int:user_id>/", RatingSummaryAPIView.as_view(), name="rating-summary"),
]
