"""
Gunicorn Configuration

Uvicorn workers under Gunicorn for production deployment.
"""

import multiprocessing
import os

bind = os.getenv("BIND", "0.0.0.0:8000")

# Reports are CPU-bound once the snapshot is loaded
workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() + 1))
worker_class = "uvicorn.workers.UvicornWorker"
max_requests = 5000
max_requests_jitter = 500
timeout = 60
keepalive = 5
graceful_timeout = 30

proc_name = "tyre-analytics-api"

errorlog = "-"
accesslog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
