from django.apps import AppConfig


class AnchoringConfig(AppConfig):
    """Configuration for the anchoring Django app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'anchoring'
