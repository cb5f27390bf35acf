import unittest
from datetime import date

from moneytor.core import analytics
from moneytor.utils.dates import DateRange
from tests.base import GROCERIES, RENT, SALARY, tx

MARCH = DateRange(date(2024, 3, 1), date(2024, 3, 31))


class TestSummaries(unittest.TestCase):

    def test_summarize_treats_anything_but_income_as_expense(self):
        totals = analytics.summarize([
            tx(100, "income", category=SALARY),
            tx(30),
            {"amount": "20.5", "type": None},
        ])
        self.assertEqual(totals.income, 100)
        self.assertEqual(totals.expenses, 50.5)
        self.assertEqual(totals.net, 49.5)
        self.assertEqual(totals.transaction_count, 3)

    def test_summarize_empty(self):
        totals = analytics.summarize([])
        self.assertEqual((totals.income, totals.expenses, totals.net, totals.transaction_count), (0, 0, 0, 0))

    def test_growth_rate(self):
        self.assertEqual(analytics.growth_rate(120, 100), 20)
        self.assertEqual(analytics.growth_rate(50, 0), 100)
        self.assertEqual(analytics.growth_rate(0, 0), 0)

    def test_health_score_is_clamped(self):
        self.assertEqual(analytics.health_score(50, 10, -5, 1.5), 100)
        self.assertEqual(analytics.health_score(0, -20, 30, 0.05), 0)

    def test_health_score_middle_band(self):
        self.assertEqual(analytics.health_score(15, 0, 10, 1), 80)
        self.assertEqual(analytics.health_score(5, 0, 0, 0.5), 60)


class TestFinancialKPIs(unittest.TestCase):

    def setUp(self):
        self.current = [
            tx(3000, "income", "2024-03-01", SALARY),
            tx(500, "expense", "2024-03-05", GROCERIES),
            tx(1000, "expense", "2024-03-02", RENT),
        ]
        self.previous = [
            tx(2500, "income", "2024-02-01", SALARY),
            tx(2000, "expense", "2024-02-02", RENT),
        ]

    def test_kpis(self):
        kpi = analytics.compute_financial_kpis(self.current, self.previous, MARCH)

        self.assertEqual(kpi.net_worth, 1500)
        self.assertAlmostEqual(kpi.monthly_income, 3000 * 30 / 31)
        self.assertAlmostEqual(kpi.monthly_expenses, 1500 * 30 / 31)
        self.assertAlmostEqual(kpi.monthly_net, 1500 * 30 / 31)
        self.assertEqual(kpi.savings_rate, 50)
        self.assertAlmostEqual(kpi.spending_velocity, 1500 / 31)
        self.assertAlmostEqual(kpi.income_growth, 20)
        self.assertAlmostEqual(kpi.expense_growth, -25)
        self.assertAlmostEqual(kpi.emergency_fund_ratio, 1500 / (1500 * 30 / 31 * 3))
        self.assertEqual(kpi.financial_health_score, 100)

        self.assertEqual(kpi.top_spending_category.name, "Rent")
        self.assertEqual(kpi.top_spending_category.amount, 1000)
        self.assertAlmostEqual(kpi.top_spending_category.percentage, 1000 / 1500 * 100)

    def test_kpis_without_income(self):
        kpi = analytics.compute_financial_kpis([tx(100)], [], MARCH)
        self.assertEqual(kpi.savings_rate, 0)
        self.assertEqual(kpi.emergency_fund_ratio, 0)
        self.assertEqual(kpi.expense_growth, 100)

    def test_kpis_without_rows(self):
        kpi = analytics.compute_financial_kpis([], [], MARCH)
        self.assertIsNone(kpi.top_spending_category)
        self.assertEqual(kpi.spending_velocity, 0)

    def test_emergency_fund_ratio_is_capped(self):
        rows = [tx(10000, "income", category=SALARY), tx(100)]
        kpi = analytics.compute_financial_kpis(rows, [], MARCH)
        self.assertEqual(kpi.emergency_fund_ratio, analytics.EMERGENCY_FUND_CAP)

    def test_top_category_ties_keep_first_seen(self):
        rows = [tx(50, category=GROCERIES), tx(50, category=RENT)]
        top = analytics.top_spending_category(rows, 100)
        self.assertEqual(top.name, "Groceries")


class TestPeriodComparison(unittest.TestCase):

    def test_changes(self):
        current = [tx(3000, "income", category=SALARY), tx(1500)]
        previous = [tx(2500, "income", category=SALARY), tx(2000)]

        result = analytics.compare_periods(current, previous)

        self.assertEqual(result.current_period.net, 1500)
        self.assertEqual(result.previous_period.net, 500)
        self.assertEqual(result.changes.income_change, 500)
        self.assertEqual(result.changes.expense_change, -500)
        self.assertEqual(result.changes.net_change, 1000)
        self.assertEqual(result.changes.transaction_count_change, 0)
        self.assertAlmostEqual(result.changes.income_percent_change, 20)
        self.assertAlmostEqual(result.changes.expense_percent_change, -25)
        self.assertAlmostEqual(result.changes.net_percent_change, 200)

    def test_net_percent_uses_absolute_previous_net(self):
        result = analytics.compare_periods([tx(100, "income", category=SALARY)], [tx(200)])
        self.assertEqual(result.changes.net_change, 300)
        self.assertAlmostEqual(result.changes.net_percent_change, 150)

    def test_empty_previous_period(self):
        result = analytics.compare_periods([tx(10)], [])
        self.assertEqual(result.changes.expense_percent_change, 0)
        self.assertEqual(result.changes.net_percent_change, 0)


class TestSpendingTrends(unittest.TestCase):

    def test_daily_points_are_zero_filled_with_running_totals(self):
        r = DateRange(date(2024, 3, 1), date(2024, 3, 3))
        rows = [
            tx(100, "income", "2024-03-01", SALARY),
            tx(40, "expense", "2024-03-03"),
            tx(10, "expense", "2024-03-05"),
        ]

        trends = analytics.build_spending_trends(rows, r)

        self.assertEqual([t.date for t in trends], list(r.iter_days()))
        self.assertEqual(trends[0].income, 100)
        self.assertEqual(trends[1].net, 0)
        self.assertEqual(trends[1].cumulative_net, 100)
        self.assertEqual(trends[2].expenses, 40)
        self.assertEqual(trends[2].cumulative_expenses, 40)
        self.assertEqual(trends[2].cumulative_net, 60)


class TestCategoryInsights(unittest.TestCase):

    def test_insights_are_sorted_with_trends(self):
        rows = [
            tx(100, category=GROCERIES),
            tx(50, category=GROCERIES),
            tx(1000, category=RENT),
            tx(900, "income", category=SALARY),
            {"amount": 999, "type": "expense", "category": None},
        ]
        previous = [
            tx(150, category=GROCERIES),
            tx(800, category=RENT),
            tx(2000, "income", category=SALARY),
        ]

        insights = analytics.build_category_insights(rows, previous, MARCH)

        self.assertEqual([i.category_name for i in insights], ["Rent", "Salary", "Groceries"])

        rent, salary, groceries = insights
        self.assertEqual(rent.trend, "up")
        self.assertAlmostEqual(rent.trend_percentage, 25)
        self.assertAlmostEqual(rent.percentage, 1000 / 2050 * 100)
        self.assertAlmostEqual(rent.monthly_average, 1000 * 30 / 31)
        self.assertEqual(salary.trend, "down")
        self.assertEqual(groceries.trend, "stable")
        self.assertEqual(groceries.transaction_count, 2)
        self.assertEqual(groceries.average_transaction, 75)
        self.assertEqual(groceries.category_color, "#22c55e")

    def test_new_category_trends_up(self):
        insights = analytics.build_category_insights([tx(10)], [], MARCH)
        self.assertEqual(insights[0].trend, "up")
        self.assertEqual(insights[0].trend_percentage, 100)

    def test_expense_totals_match_categorised_expenses(self):
        rows = [
            tx(120, category=GROCERIES),
            tx(35.5, category=GROCERIES, day="2024-03-20"),
            tx(1000, category=RENT),
            tx(900, "income", category=SALARY),
            {"amount": 60, "type": "expense", "category": None},
        ]
        categorised_expenses = [r for r in rows if r["type"] == "expense" and r["category"]]
        expense_ids = {r["category"]["id"] for r in categorised_expenses}

        insights = analytics.build_category_insights(rows, [], MARCH)

        self.assertAlmostEqual(
            sum(i.total_amount for i in insights if i.category_id in expense_ids),
            analytics.summarize(categorised_expenses).expenses,
        )


if __name__ == '__main__':
    unittest.main()
