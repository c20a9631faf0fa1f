"""
ImageUp app configuration.
"""
from django.apps import AppConfig


class ImageUpConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'imageup'
    verbose_name = 'Image Uploads'

    def ready(self):
        """Import signals when app is ready."""
        import imageup.signals  # noqa
