"""
Jobs Module.

Client jobs and their tasks.  Billing terms on a job feed invoice line
generation; task hours feed job-overtime flagging and progress.
"""

from backoffice_modules.jobs.models import (
    BillingType,
    Job,
    JobStatus,
    Priority,
    Task,
    TaskStatus,
)

__all__ = [
    "BillingType",
    "Job",
    "JobStatus",
    "Priority",
    "Task",
    "TaskStatus",
]
