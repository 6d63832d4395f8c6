from django.urls import path
from .views import (
    CategoryListAPIView,
    MyJobsListAPIView,
    MyTasksListAPIView,
    TaskDetailAPIView,
    TaskListCreateAPIView,
    TaskStatusAPIView,
)

urlpatterns = [
    path("categories/", CategoryListAPIView.as_view(), name="category-list"),
    path("tasks/", TaskListCreateAPIView.as_view(), name="task-list"),
    path("tasks/<int:pk>/", TaskDetailAPIView.as_view(), name="task-detail"),
    path("tasks/<int:pk>/status/", TaskStatusAPIView.as_view(), name="task-status"),
    path("my-tasks/", MyTasksListAPIView.as_view(), name="my-tasks"),
    path("my-jobs/", MyJobsListAPIView.as_view(), name="my-jobs"),
]
