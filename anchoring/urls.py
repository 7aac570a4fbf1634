"""URL configuration for the anchoring app.

This module defines the JSON endpoints of the anchoring API. It also
specifies the ``app_name`` to allow namespacing from the project URL
configuration.
"""

from django.urls import path

from . import views

app_name = 'anchoring'

urlpatterns = [
    path('fingerprint/', views.fingerprint, name='fingerprint'),
    path('fingerprint/selection/', views.fingerprint_text_selection, name='fingerprint_selection'),
    path('reattach/', views.reattach, name='reattach'),
    path('health/', views.health, name='health'),
]
