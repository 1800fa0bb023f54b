"""Hireboard — job board backend.

Job postings, applications and job alerts over a REST API, with a
WebSocket channel that pushes application updates to whoever is
online right now.
"""

__version__ = "0.1.0"
