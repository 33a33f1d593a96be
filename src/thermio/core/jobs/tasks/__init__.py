"""Background job tasks.

Each task walks the active workspaces and handles every workspace in its
own session, so one failing tenant never blocks the others.
"""

from thermio.core.jobs.tasks.compliance import hourly_compliance, run_compliance_pass
from thermio.core.jobs.tasks.expiry import expire_temporary_accounts, run_expiry_pass


__all__ = [
    "expire_temporary_accounts",
    "hourly_compliance",
    "run_compliance_pass",
    "run_expiry_pass",
]
