"""Model factories shared by the test modules."""

from datetime import date
from decimal import Decimal

from backoffice_modules.invoicing.models import Invoice, InvoiceLineItem, InvoiceStatus
from backoffice_modules.jobs.models import BillingType, Job, JobStatus, Task
from backoffice_modules.timesheets.models import TimesheetEntry, TimesheetStatus

TODAY = date(2025, 3, 12)  # a Wednesday


def make_job(
    job_id="job-1",
    title="Website Redesign",
    billing_type=BillingType.HOURLY,
    billing_rate="150",
    quoted_hours="40",
    actual_hours="0",
    status=JobStatus.IN_PROGRESS,
    **kwargs,
) -> Job:
    return Job(
        id=job_id,
        job_code=kwargs.pop("job_code", f"J-{job_id}"),
        title=title,
        billing_type=billing_type,
        billing_rate=Decimal(billing_rate),
        quoted_hours=Decimal(quoted_hours),
        actual_hours=Decimal(actual_hours),
        status=status,
        **kwargs,
    )


def make_task(task_id="task-1", job_id="job-1", actual_hours="0", **kwargs) -> Task:
    return Task(
        id=task_id,
        job_id=job_id,
        name=kwargs.pop("name", f"Task {task_id}"),
        actual_hours=Decimal(actual_hours),
        **kwargs,
    )


_entry_counter = iter(range(1, 1_000_000))


def make_entry(
    day: date,
    hours="8",
    user_id="user-1",
    job_id="job-1",
    task_id=None,
    status=TimesheetStatus.PENDING_NORMAL,
    **kwargs,
) -> TimesheetEntry:
    return TimesheetEntry(
        id=kwargs.pop("entry_id", f"entry-{next(_entry_counter)}"),
        user_id=user_id,
        user_name=kwargs.pop("user_name", user_id.title()),
        date=day,
        hours=Decimal(str(hours)),
        job_id=job_id,
        task_id=task_id,
        status=status,
        **kwargs,
    )


def make_line(description="Consulting", quantity="1", rate="100", amount=None) -> InvoiceLineItem:
    qty, r = Decimal(quantity), Decimal(rate)
    return InvoiceLineItem(
        description=description,
        quantity=qty,
        rate=r,
        amount=Decimal(amount) if amount is not None else qty * r,
    )


def make_invoice(
    invoice_id="inv-1",
    total="110.00",
    status=InvoiceStatus.SENT,
    issue_date=date(2025, 2, 1),
    due_date=date(2025, 3, 3),
    client_company="Acme Pty Ltd",
    **kwargs,
) -> Invoice:
    total_d = Decimal(total)
    return Invoice(
        id=invoice_id,
        number=kwargs.pop("number", f"INV-{invoice_id}"),
        job_id=kwargs.pop("job_id", "job-1"),
        issue_date=issue_date,
        due_date=due_date,
        tax_rate=Decimal("0"),
        subtotal=total_d,
        tax_amount=Decimal("0"),
        total=total_d,
        status=status,
        client_company=client_company,
        line_items=kwargs.pop("line_items", (make_line(amount=total),)),
        **kwargs,
    )
