from django.apps import AppConfig


class PointsCoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'pitchside.points_core'
    verbose_name = 'Points and Standings Engine'
