"""
Backoffice Modules.

Thin orchestration layers over the Backoffice Kernel and Engines.
Each module contains:
- Domain models (the nouns)
- Workflows (state machines)
- A service that applies organisation settings to engine calls

Modules:
- Jobs: Client jobs and their tasks
- Invoicing: Client invoices, line items, send/pay lifecycle
- Timesheets: Logged entries, local drafts, flagging and approval

Actual calculation logic lives in the engines.
"""

from backoffice_modules import (
    invoicing,
    jobs,
    timesheets,
)

__all__ = [
    "invoicing",
    "jobs",
    "timesheets",
]
