"""Tests for job profitability and progress."""

from decimal import Decimal

from backoffice_engines.job_metrics import job_cost, job_financials, job_progress, job_revenue
from backoffice_modules.jobs.models import BillingType, TaskStatus
from tests.factories import make_job, make_task


class TestJobFinancials:
    def test_hourly_job(self):
        job = make_job(actual_hours="10", billing_rate="100")
        fin = job_financials(job, Decimal("0.70"))
        assert fin.revenue == Decimal("1000.00")
        assert fin.cost == Decimal("700.00")
        assert fin.profit == Decimal("300.00")
        assert fin.margin == 30

    def test_fixed_price_revenue_is_billing_rate(self):
        job = make_job(billing_type=BillingType.FIXED, billing_rate="5000", actual_hours="20")
        assert job_revenue(job) == Decimal("5000")
        assert job_cost(job, "0.5") == Decimal("50000.00")
        assert job_financials(job, "0.5").margin == -900

    def test_api_figures_win(self):
        job = make_job(actual_hours="10", revenue=Decimal("1234"), total_cost=Decimal("34"))
        fin = job_financials(job, "0.7")
        assert (fin.revenue, fin.cost, fin.profit) == (Decimal("1234"), Decimal("34"), Decimal("1200"))

    def test_zero_revenue_margin_is_zero(self):
        job = make_job(actual_hours="0")
        assert job_financials(job, "0.7").margin == 0


class TestJobProgress:
    def test_from_tasks(self):
        job = make_job(quoted_hours="40", actual_hours="99")
        tasks = [
            make_task("t1", estimated_hours="10", actual_hours="5", status=TaskStatus.COMPLETED),
            make_task("t2", estimated_hours="10", actual_hours="2", status=TaskStatus.IN_PROGRESS),
            make_task("t3", estimated_hours="20"),
            make_task("t4", job_id="job-2", actual_hours="100"),
        ]
        progress = job_progress(job, tasks)
        assert progress.actual_hours == Decimal("7")
        assert progress.estimated_hours == Decimal("40")
        assert progress.hours_pct == 18  # 17.5 rounds half up
        assert not progress.hours_over
        assert (progress.total_tasks, progress.completed_tasks, progress.in_progress_tasks) == (3, 1, 1)
        assert progress.task_pct == 33

    def test_from_job_hours_and_capped(self):
        progress = job_progress(make_job(quoted_hours="10", actual_hours="15"), [])
        assert progress.hours_pct == 100
        assert progress.hours_over
        assert progress.task_pct == 0
