"""
Top-level package for the UPSC prep portal core.

This package holds the read-only study catalog (subjects/topics and
previous-year exam papers), substring search over it, in-memory view
counters, the debounced search controller and the section navigation
state machine used by the front end, plus a small FastAPI service and
HTTP client around them.  There are no side-effects on import; the
catalog is only read when :func:`upsc_portal.catalog.load_catalog` is
called or the API starts.
"""
