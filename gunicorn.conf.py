"""
Gunicorn configuration for bloglist-api.

    gunicorn -c gunicorn.conf.py

All values are overridable via GUNICORN_* environment variables.
"""

import multiprocessing
import os

# =============================================================================
# APPLICATION
# =============================================================================

wsgi_app = os.environ.get("GUNICORN_WSGI_APP", "bloglist_api.wsgi:application")

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:3003")


# =============================================================================
# WORKERS
# =============================================================================

# gthread: each worker serves requests on a thread pool. Request handlers
# share nothing in memory; likes and registrations are serialized by the
# database, so any worker count is safe.
worker_class = os.environ.get("GUNICORN_WORKER_CLASS", "gthread")


def get_workers():
    env_workers = os.environ.get("GUNICORN_WORKERS")
    if env_workers:
        return int(env_workers)
    # SQLite allows one writer at a time; more processes only add lock waits
    return max(min(multiprocessing.cpu_count(), 4), 2)


workers = get_workers()

threads = int(os.environ.get("GUNICORN_THREADS", "4"))


# =============================================================================
# TIMEOUTS & LIMITS
# =============================================================================

# Must exceed SQLITE_BUSY_TIMEOUT so a waiting writer is not killed first
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "60"))

graceful_timeout = int(os.environ.get("GUNICORN_GRACEFUL_TIMEOUT", "30"))

keepalive = int(os.environ.get("GUNICORN_KEEPALIVE", "5"))

max_requests = int(os.environ.get("GUNICORN_MAX_REQUESTS", "1000"))
max_requests_jitter = int(os.environ.get("GUNICORN_MAX_REQUESTS_JITTER", "50"))

limit_request_line = int(os.environ.get("GUNICORN_LIMIT_REQUEST_LINE", "4094"))
limit_request_fields = int(os.environ.get("GUNICORN_LIMIT_REQUEST_FIELDS", "100"))


# =============================================================================
# PROXY
# =============================================================================

# ProxyFix in the app trusts one hop; restrict who may send the headers
forwarded_allow_ips = os.environ.get("GUNICORN_FORWARDED_ALLOW_IPS", "127.0.0.1")


# =============================================================================
# LOGGING
# =============================================================================

loglevel = os.environ.get("GUNICORN_LOGLEVEL", "info")

accesslog = os.environ.get("GUNICORN_ACCESS_LOG", "-")
errorlog = os.environ.get("GUNICORN_ERROR_LOG", "-")

capture_output = os.environ.get("GUNICORN_CAPTURE_OUTPUT", "true").lower() == "true"


# =============================================================================
# HOOKS
# =============================================================================

def on_starting(server):
    """Called just before master process starts."""
    import logging
    logging.getLogger("gunicorn").info(
        f"Starting bloglist-api with {workers} workers, "
        f"worker_class={worker_class}, threads={threads}"
    )


def worker_abort(worker):
    """Called when worker receives SIGABRT (timeout)."""
    import logging
    logging.getLogger("gunicorn").error(f"Worker {worker.pid} aborted (timeout?)")
