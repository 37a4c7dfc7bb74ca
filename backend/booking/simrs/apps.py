from django.apps import AppConfig


class SimrsConfig(AppConfig):
    name = 'booking.simrs'
    label = 'simrs'
    verbose_name = 'SIMRS registry'
