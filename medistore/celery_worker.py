# medistore/celery_worker.py
from celery import Celery

from medistore.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
)

celery_app = Celery(
    "medistore",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#import tasks explicitly so the worker registers them
celery_app.conf.imports = (
    "medistore.services.notification_service",
)

celery_app.conf.timezone = "UTC"
celery_app.conf.task_ignore_result = True
#eager mode runs tasks inline, no broker needed (tests, local dev)
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
#do not block a request for long when the broker is down
celery_app.conf.broker_connection_timeout = 2
celery_app.conf.broker_transport_options = {"max_retries": 1}
