"""
Waitress WSGI entry point for production deployment.

Usage::

    python wsgi.py

Waitress is a pure-Python WSGI server with a thread pool, so requests
are served concurrently against the application's shared entity
caches.
"""

import os

from waitress import serve

from repair_shop import create_app
from repair_shop.extensions import entity_cache

# Force production config when running via this entry point.
app = create_app(os.environ.get("FLASK_ENV", "production"))

if __name__ == "__main__":
    host = os.environ.get("WAITRESS_HOST", "127.0.0.1")
    port = int(os.environ.get("WAITRESS_PORT", "8080"))
    threads = int(os.environ.get("WAITRESS_THREADS", "8"))
    print(f"Starting Waitress on {host}:{port} ({threads} threads)")
    try:
        serve(app, host=host, port=port, threads=threads)
    finally:
        entity_cache.shutdown(app)
