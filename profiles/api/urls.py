from django.urls import path
from .views import (
    CustomerProfileListView,
    ProfileDocumentDeleteView,
    ProfileDocumentListCreateView,
    ProfileView,
    TaskerProfileListView,
    TaskerProfileView,
)

urlpatterns = [
    path("profile/documents/", ProfileDocumentListCreateView.as_view(), name="profile-documents"),
    path("profile/documents/<int:pk>/", ProfileDocumentDeleteView.as_view(), name="profile-document-detail"),
    path("profile/<int:pk>/", ProfileView.as_view(), name="profile"),
    path("profile/<int:pk>/tasker/", TaskerProfileView.as_view(), name="tasker-profile"),
    path("profiles/tasker/", TaskerProfileListView.as_view(), name="tasker-profiles"),
    path("profiles/customer/", CustomerProfileListView.as_view(), name="customer-profiles"),
]
