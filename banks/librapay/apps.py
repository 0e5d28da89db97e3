from django.apps import AppConfig


class LibraPayConfig(AppConfig):
    name = 'banks.librapay'
    label = 'librapay'
    verbose_name = 'LibraPay'
    default_auto_field = 'django.db.models.BigAutoField'
