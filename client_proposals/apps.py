from django.apps import AppConfig


class ClientProposalsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "client_proposals"
    verbose_name = "Proposals"
