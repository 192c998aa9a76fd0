from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'core'

    def ready(self) -> None:  # pragma: no cover - side effects only
        from . import repositories  # noqa: F401
