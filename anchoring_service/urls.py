"""Root URL configuration for anchoring_service.

The anchoring API is mounted under ``api/``.
"""

from django.urls import include, path

urlpatterns = [
    path('api/', include('anchoring.urls')),
]
