from django.urls import path
from .views import (
    ApplicationAcceptedEmailAPIView,
    TaskApplicationEmailAPIView,
    TaskCompletedEmailAPIView,
    WelcomeEmailAPIView,
)

urlpatterns = [
    path("emails/welcome/", WelcomeEmailAPIView.as_view(), name="email-welcome"),
    path("emails/task-application/", TaskApplicationEmailAPIView.as_view(), name="email-task-application"),
    path("emails/application-accepted/", ApplicationAcceptedEmailAPIView.as_view(), name="email-application-accepted"),
    path("emails/task-completed/", TaskCompletedEmailAPIView.as_view(), name="email-task-completed"),
]
