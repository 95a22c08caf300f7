"""Tests for CSV rendering and report tab exports."""

from decimal import Decimal

from backoffice_engines.csv_export import (
    NO_DATA_ROW,
    ReportTab,
    export_filename,
    export_report_tab,
    report_tab_rows,
    to_csv,
)
from backoffice_engines.reporting import build_report
from backoffice_modules.invoicing.models import InvoiceStatus
from backoffice_modules.jobs.models import JobStatus
from tests.factories import TODAY, make_entry, make_invoice, make_job


class TestToCsv:
    def test_empty(self):
        assert to_csv([]) == ""

    def test_header_from_first_row_and_no_trailing_newline(self):
        text = to_csv([{"a": 1, "b": "x"}, {"a": 2, "b": "y"}])
        assert text == "a,b\n1,x\n2,y"

    def test_quoting(self):
        text = to_csv([{"Client": 'Acme, "The" Co', "Notes": "line1\nline2"}])
        assert text == 'Client,Notes\n"Acme, ""The"" Co","line1\nline2"'

    def test_cells(self):
        text = to_csv([{
            "amount": Decimal("1E+3"),
            "cents": Decimal("12.50"),
            "flag": True,
            "missing": None,
            "status": JobStatus.OPEN,
        }])
        assert text.splitlines()[1] == "1000,12.50,true,,open"

    def test_single_empty_cell_is_not_quoted(self):
        assert to_csv([{"Note": ""}]) == "Note\n"
        assert to_csv([{"Note": None}, {"Note": "x"}]) == "Note\n\nx"

    def test_empty_cells_in_wider_rows(self):
        assert to_csv([{"a": "", "b": ""}]) == "a,b\n,"

    def test_missing_keys_are_blank_and_extra_keys_ignored(self):
        text = to_csv([{"a": 1, "b": 2}, {"a": 3, "c": 9}])
        assert text == "a,b\n1,2\n3,"

    def test_deterministic(self):
        rows = [{"x": Decimal("1.10"), "y": "z"}]
        assert to_csv(rows) == to_csv(list(rows))


class TestExportFilename:
    def test_hyphenated_range(self):
        assert export_filename("finance", "last_3_months") == "finance-last-3-months.csv"
        assert export_filename(ReportTab.JOBS, "all") == "jobs-all.csv"


class TestReportTabs:
    def _report(self, date_range="all"):
        jobs = [
            make_job("j1", title="Alpha", actual_hours="10", billing_rate="100",
                     status=JobStatus.COMPLETED, client_name="Acme",
                     start_date=TODAY, completion_date=TODAY),
        ]
        entries = [make_entry(TODAY, "8", user_id="ann")]
        invoices = [make_invoice("i1", total="1100.00", status=InvoiceStatus.PAID,
                                 issue_date=TODAY, client_company="Acme")]
        return build_report(jobs, entries, invoices, date_range, TODAY, Decimal("0.7"))

    def test_overview_months(self):
        rows = report_tab_rows("overview", self._report())
        assert rows == [{
            "Month": "Mar 2025",
            "Revenue": Decimal("1000.00"),
            "Cost": Decimal("700.00"),
            "Profit": Decimal("300.00"),
        }]

    def test_jobs_header_names_currency(self):
        rows = report_tab_rows("jobs", self._report(), currency_code="NZD")
        assert "Revenue (NZD)" in rows[0]
        assert rows[0]["Job ID"] == "J-j1"

    def test_time(self):
        rows = report_tab_rows(ReportTab.TIME, self._report())
        assert rows[0]["Employee"] == "Ann"
        assert rows[0]["Billable %"] == 100

    def test_finance_clients(self):
        export = export_report_tab("finance", self._report(), "all")
        assert export.filename == "finance-all.csv"
        assert export.text == (
            "Client,Invoiced (AUD),Collected (AUD),Outstanding (AUD)\n"
            "Acme,1100.00,1100.00,0.00"
        )

    def test_fallbacks_when_empty(self):
        report = build_report([], [], [], "this_month", TODAY, Decimal("0.7"))
        assert report_tab_rows("jobs", report) == [NO_DATA_ROW]
        assert report_tab_rows("time", report) == [NO_DATA_ROW]
        overview = report_tab_rows("overview", report)[0]
        assert overview["Total Jobs"] == 0
        finance = report_tab_rows("finance", report)[0]
        assert list(finance) == ["Total Invoiced", "Collected", "Outstanding", "Overdue"]

    def test_export_logs(self, captured_logs):
        export_report_tab("time", self._report(), "all")
        records = [r for r in captured_logs() if r["message"] == "report_tab_exported"]
        assert records[0]["export_filename"] == "time-all.csv"
        assert records[0]["row_count"] == 1
