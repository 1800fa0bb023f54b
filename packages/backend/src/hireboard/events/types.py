"""Event name constants for real-time pushes.

Centralizing the names prevents typos between the services that emit
them and the frontend listeners that subscribe to them. Names are
camelCase because that's what the browser client listens for.
"""

# ─── Targeted at the employer ────────────────────────────

NEW_APPLICATION = "newApplication"
APPLICATION_NOTE_ADDED = "applicationNoteAdded"

# ─── Targeted at the applicant ───────────────────────────

APPLICATION_STATUS_UPDATE = "applicationStatusUpdate"
