"""HTTP API for page cache status.

This package provides a Flask application that serves probe results as
JSON.  It is an **optional** extra — install with::

    pip install py-pcstat[web]

The ``create_app`` factory in ``app.py`` creates a prober and serves:

- ``GET /api/status?path=...`` — status record for one path.
- ``POST /api/status`` — status records for several paths.
- ``GET /api/log`` — the probe audit log.
"""
