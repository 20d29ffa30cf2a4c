"""
Root URL configuration of the certification backend.

- /admin/: Django admin (Jazzmin)
- /api/elearning/: test taking, certificates and activity feed
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/elearning/", include("elearning.urls")),
]
