"""
Gunicorn configuration for the board API.

Tuned for Railway / Render single-instance containers.
Env vars that override defaults:
  PORT     — TCP port to bind (Railway sets this automatically)
  WORKERS  — number of worker processes (default: 2)

With STORE_BACKEND=json keep WORKERS=1: the file lock is per process.
"""
import os

# Bind to the port Railway/Render injects via $PORT
bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WORKERS", "2"))

# Each worker runs Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

wsgi_app = "wishboard.main:app"

keepalive = 5

# Photo uploads to the object store can be slow on mobile uplinks.
timeout = 120

# Stdout only (Railway / Render capture it automatically).
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
