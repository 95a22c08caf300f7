"""
Module: backoffice_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for backoffice_modules
    services and for callers outside the core.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import backoffice_kernel and the backoffice_modules models.
    MUST NOT import backoffice_modules services or backoffice_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      ``today`` is passed in by callers.
    - Decimal-only arithmetic for money and hours.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Entry-point engine functions are traced via ``@traced_engine`` (see
    ``backoffice_engines.tracer``), emitting BACKOFFICE_ENGINE_TRACE records.

Usage:
    from backoffice_engines import compute_invoice_totals, round_hours
    from backoffice_engines.timesheets import group_weekly_rows
    from backoffice_engines.reporting import build_report
"""

from backoffice_kernel.logging_config import get_logger

logger = get_logger("engines")

from backoffice_engines.billing_time import round_hours
from backoffice_engines.csv_export import CsvExport, ReportTab, export_report_tab, to_csv
from backoffice_engines.formatting import format_currency, format_date, format_timer
from backoffice_engines.invoicing import (
    InvoiceSummary,
    InvoiceTotals,
    add_line,
    blank_line_item,
    build_auto_line_item,
    calculate_due_date,
    compute_invoice_totals,
    effective_status,
    generate_invoice_number,
    invoiceable_jobs,
    is_overdue,
    recompute_line,
    remove_line,
    summarize_invoices,
    update_line,
    validate_invoice_draft,
)
from backoffice_engines.job_metrics import JobFinancials, JobProgress, job_financials, job_progress
from backoffice_engines.periods import (
    DateRange,
    PeriodKind,
    add_days,
    add_months,
    get_monday,
    get_month_weeks,
    get_week_days,
    resolve_date_range,
    shift_anchor,
    to_ymd,
)
from backoffice_engines.reporting import Report, build_report
from backoffice_engines.tax import TaxResult, apply_tax, clamp_tax_rate
from backoffice_engines.timesheets import (
    PeriodStats,
    SubmissionState,
    TableRow,
    aggregate_by_period,
    classify_entry,
    column_totals,
    combine_flag_reasons,
    flag_entry,
    group_monthly_rows,
    group_weekly_rows,
    job_overtime_check,
    period_stats,
    submission_state,
    threshold_for_period,
)

__all__ = [
    "CsvExport",
    "DateRange",
    "InvoiceSummary",
    "InvoiceTotals",
    "JobFinancials",
    "JobProgress",
    "PeriodKind",
    "PeriodStats",
    "Report",
    "ReportTab",
    "SubmissionState",
    "TableRow",
    "TaxResult",
    "add_days",
    "add_line",
    "add_months",
    "aggregate_by_period",
    "apply_tax",
    "blank_line_item",
    "build_auto_line_item",
    "build_report",
    "calculate_due_date",
    "clamp_tax_rate",
    "classify_entry",
    "column_totals",
    "combine_flag_reasons",
    "compute_invoice_totals",
    "effective_status",
    "export_report_tab",
    "flag_entry",
    "format_currency",
    "format_date",
    "format_timer",
    "generate_invoice_number",
    "get_monday",
    "get_month_weeks",
    "get_week_days",
    "group_monthly_rows",
    "group_weekly_rows",
    "invoiceable_jobs",
    "is_overdue",
    "job_financials",
    "job_overtime_check",
    "job_progress",
    "period_stats",
    "recompute_line",
    "remove_line",
    "resolve_date_range",
    "round_hours",
    "shift_anchor",
    "submission_state",
    "summarize_invoices",
    "threshold_for_period",
    "to_csv",
    "to_ymd",
    "update_line",
    "validate_invoice_draft",
]
