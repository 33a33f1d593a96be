"""Workspace event vocabulary.

These strings are stored in ``workspace_events.action_type`` and are part of
the audit log contract with clients; never rename an existing one.
"""

# Fleet and people
USER_CREATED = "user_created"
USER_SUSPENDED = "user_suspended"
USER_REACTIVATED = "user_reactivated"
USER_EXPIRED = "user_expired"
ROLE_CHANGED = "role_changed"
OWNERSHIP_TRANSFERRED = "ownership_transferred"
ASSET_CREATED = "asset_created"
ASSET_SUSPENDED = "asset_suspended"
ASSET_REACTIVATED = "asset_reactivated"
ASSET_EXPIRED = "asset_expired"
SERVICE_RECORDED = "service_recorded"

# Daily log lifecycle
CHECKLIST_COMPLETED = "checklist_completed"
TEMP_RECORDED = "temp_recorded"
TEMP_EDITED = "temp_edited"
SHIFT_ENDED = "shift_ended"
SIGNOFF_COMPLETED = "signoff_completed"
COMMENTS_UPDATED = "comments_updated"
EXCEPTION_FLAGGED = "exception_flagged"

# Workspace configuration
SETTINGS_UPDATED = "settings_updated"
CHECKLIST_UPDATED = "checklist_updated"

# Scheduled work
EXPORT_GENERATED = "export_generated"
RETENTION_PURGED = "retention_purged"

# Portal
WORKSPACE_CREATED = "workspace_created"
WORKSPACE_SUSPENDED = "workspace_suspended"
WORKSPACE_REACTIVATED = "workspace_reactivated"
LIMITS_UPDATED = "limits_updated"

ALL_ACTIONS = frozenset(
    value
    for name, value in dict(globals()).items()
    if name.isupper() and isinstance(value, str)
)
