from printflow import create_app
from printflow.extensions import celery_app

app = create_app()
# docker-compose starts the worker with `-A printflow.celery_worker.celery`
celery = celery_app
