"""Root URL configuration.

Every app exposes its endpoints through `<app>/api/urls.py`; they are all
mounted under `/api/`.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("user_auth_app.api.urls")),
    path("api/", include("profiles.api.urls")),
    path("api/", include("tasks.api.urls")),
    path("api/", include("applications.api.urls")),
    path("api/", include("chat.api.urls")),
    path("api/", include("reviews.api.urls")),
    path("api/", include("notifications.api.urls")),
    path("api/", include("common.api.urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
