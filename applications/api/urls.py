from django.urls import path
from .views import (
    ApplicationAcceptAPIView,
    ApplicationDetailAPIView,
    ApplicationRejectAPIView,
    ApplicationWithdrawAPIView,
    MyApplicationListAPIView,
    TaskApplicationListCreateAPIView,
)

urlpatterns = [
    path("tasks/<int:pk>/applications/", TaskApplicationListCreateAPIView.as_view(), name="task-applications"),
    path("applications/", MyApplicationListAPIView.as_view(), name="my-applications"),
    path("applications/<int:pk>/", ApplicationDetailAPIView.as_view(), name="application-detail"),
    path("applications/<int:pk>/accept/", ApplicationAcceptAPIView.as_view(), name="application-accept"),
    path("applications/<int:pk>/reject/", ApplicationRejectAPIView.as_view(), name="application-reject"),
    path("applications/<int:pk>/withdraw/", ApplicationWithdrawAPIView.as_view(), name="application-withdraw"),
]
