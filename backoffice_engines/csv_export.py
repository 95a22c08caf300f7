"""
CSV export for report tabs.

``to_csv`` renders rows with the header taken from the first row's keys,
minimal RFC 4180 quoting (fields containing a comma, quote or newline are
quoted, quotes doubled), ``\\n`` between records and no trailing newline.
Identical rows always produce identical text.

``export_report_tab`` builds the rows for one tab of a ``Report`` and the
download file name.  Tabs without data export a single fallback row.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from backoffice_engines.periods import DateRange
from backoffice_engines.reporting import Report
from backoffice_kernel.logging_config import get_logger

logger = get_logger("engines.csv_export")

NO_DATA_ROW: dict[str, str] = {"Note": "No data"}


class ReportTab(str, Enum):
    OVERVIEW = "overview"
    JOBS = "jobs"
    TIME = "time"
    FINANCE = "finance"


@dataclass(frozen=True)
class CsvExport:
    filename: str
    text: str


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """Render rows as CSV text; an empty sequence renders as ``""``.

    Columns come from the first row in its key order; keys missing from a
    later row render as empty cells and extra keys are ignored.
    """
    if not rows:
        return ""
    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    for record in [headers, *([_cell(row.get(h)) for h in headers] for row in rows)]:
        # csv.writer quotes a lone empty field as "" to keep the row visible
        if record == [""]:
            buffer.write("\n")
        else:
            writer.writerow(record)
    text = buffer.getvalue()
    return text[:-1] if text.endswith("\n") else text


def export_filename(tab: ReportTab | str, date_range: DateRange | str) -> str:
    """``{tab}-{range}.csv`` with underscores in the range as hyphens."""
    return f"{ReportTab(tab).value}-{DateRange(date_range).value.replace('_', '-')}.csv"


def report_tab_rows(
    tab: ReportTab | str,
    report: Report,
    currency_code: str = "AUD",
) -> list[dict[str, Any]]:
    """Rows exported for one report tab, with its fallback when it has no data."""
    kind = ReportTab(tab)

    if kind is ReportTab.OVERVIEW:
        overview = report.overview
        rows = [
            {"Month": m.month, "Revenue": m.revenue, "Cost": m.cost, "Profit": m.profit}
            for m in overview.revenue_by_month
        ]
        return rows or [{
            "Total Revenue": overview.total_revenue,
            "Total Profit": overview.total_profit,
            "Avg Margin %": overview.avg_margin,
            "Total Hours": overview.total_hours,
            "Total Jobs": overview.total_jobs,
            "Completed Jobs": overview.completed_jobs,
            "Active Clients": overview.active_clients,
        }]

    if kind is ReportTab.JOBS:
        rows = [
            {
                "Job ID": j.job_id,
                "Title": j.title,
                "Client": j.client,
                f"Revenue ({currency_code})": j.revenue,
                "Margin %": j.margin,
                "Status": j.status,
            }
            for j in report.jobs.top_jobs_by_revenue
        ]
        return rows or [dict(NO_DATA_ROW)]

    if kind is ReportTab.TIME:
        rows = [
            {
                "Employee": e.name,
                "Total Hours": e.total_hours,
                "Billable Hours": e.billable_hours,
                "Billable %": e.billable_pct,
                "Entries": e.entry_count,
            }
            for e in report.time.by_employee
        ]
        return rows or [dict(NO_DATA_ROW)]

    finance = report.finance
    rows = [
        {
            "Client": c.company,
            f"Invoiced ({currency_code})": c.invoiced,
            f"Collected ({currency_code})": c.collected,
            f"Outstanding ({currency_code})": c.outstanding,
        }
        for c in finance.top_clients_by_revenue
    ]
    return rows or [{
        "Total Invoiced": finance.invoiced,
        "Collected": finance.collected,
        "Outstanding": finance.outstanding,
        "Overdue": finance.overdue,
    }]


def export_report_tab(
    tab: ReportTab | str,
    report: Report,
    date_range: DateRange | str,
    currency_code: str = "AUD",
) -> CsvExport:
    """File name and CSV text for downloading one report tab."""
    rows = report_tab_rows(tab, report, currency_code)
    export = CsvExport(filename=export_filename(tab, date_range), text=to_csv(rows))
    logger.info(
        "report_tab_exported",
        extra={"tab": ReportTab(tab).value, "row_count": len(rows), "export_filename": export.filename},
    )
    return export
