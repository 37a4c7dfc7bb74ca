import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('booking')

# All CELERY_* settings come from Django settings (beat schedule included)
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()
