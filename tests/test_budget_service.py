from datetime import date

from moneytor.core.errors import DatabaseError, InvariantError
from moneytor.schemas.budget_schema import BudgetCreate, BudgetFilters, BudgetUpdate
from moneytor.services import budget_service
from tests.base import BaseTestCase, GROCERIES, RENT, SALARY, TODAY, USER_ID, api_error, tx

FUN = {"id": "c0000000-0000-0000-0000-000000000004", "name": "Fun", "type": "expense",
       "color": "#a855f7", "icon": None}


def make_budget(budget_id="b1", category=GROCERIES, amount=500, period="monthly",
                start="2024-03-01", end="2024-03-31") -> dict:
    return {
        "id": budget_id,
        "user_id": USER_ID,
        "category_id": category["id"],
        "amount": amount,
        "period": period,
        "start_date": start,
        "end_date": end,
        "category": category,
    }


def with_spending(budget: dict, spent: float, today: date = TODAY):
    return budget_service.compute_budget_stats(budget, [tx(spent, category=budget["category"])], today)


class TestBudgetPeriods(BaseTestCase):

    def test_status(self):
        budget = make_budget()
        self.assertEqual(budget_service.budget_status(budget, date(2024, 2, 29)), "upcoming")
        self.assertEqual(budget_service.budget_status(budget, date(2024, 3, 31)), "active")
        self.assertEqual(budget_service.budget_status(budget, date(2024, 4, 1)), "expired")

    def test_missing_end_date_follows_period(self):
        budget = make_budget(period="weekly", start="2024-03-13", end=None)
        period = budget_service.budget_period_range(budget)
        self.assertEqual(period.end, date(2024, 3, 16))


class TestBudgetCrud(BaseTestCase):

    def test_create_derives_end_date(self):
        self.db.queue("categories", [GROCERIES])
        self.db.queue("budgets", [{**make_budget(), "category": None}])

        payload = BudgetCreate(category_id=GROCERIES["id"], amount=500, start_date=date(2024, 2, 5))
        row = budget_service.create_budget(self.db, USER_ID, payload)

        insert = self.db.queries_for("budgets", "insert")[0]
        self.assertEqual(insert.payload["end_date"], "2024-02-29")
        self.assertEqual(insert.payload["period"], "monthly")
        self.assertEqual(insert.payload["user_id"], USER_ID)
        self.assertEqual(row["category"]["name"], "Groceries")

    def test_create_requires_expense_category(self):
        self.db.queue("categories", [SALARY])
        payload = BudgetCreate(category_id=SALARY["id"], amount=500, start_date=TODAY)

        with self.assertRaises(InvariantError):
            budget_service.create_budget(self.db, USER_ID, payload)
        self.assertEqual(self.db.queries_for("budgets"), [])

    def test_create_with_unknown_category(self):
        payload = BudgetCreate(category_id=RENT["id"], amount=500, start_date=TODAY)
        with self.assertRaisesRegex(InvariantError, "Invalid category"):
            budget_service.create_budget(self.db, USER_ID, payload)

    def test_create_rejects_end_before_start(self):
        with self.assertRaises(ValueError):
            BudgetCreate(category_id=RENT["id"], amount=5, start_date=TODAY, end_date=date(2024, 3, 1))

    def test_moving_start_date_rederives_end_from_stored_period(self):
        self.db.queue("budgets", [make_budget(period="weekly", start="2024-03-10", end="2024-03-16")])
        self.db.queue("budgets", [make_budget()])

        budget_service.update_budget(self.db, USER_ID, "b1", BudgetUpdate(start_date=date(2024, 4, 3)))

        update = self.db.queries_for("budgets", "update")[0]
        self.assertEqual(update.payload, {"start_date": "2024-04-03", "end_date": "2024-04-06"})
        self.assertEqual(update.filters(), {"id": "b1", "user_id": USER_ID})

    def test_update_keeps_embedded_category(self):
        self.db.queue("budgets", [make_budget()])
        self.db.queue("budgets", [{**make_budget(amount=650), "category": None}])

        row = budget_service.update_budget(self.db, USER_ID, "b1", BudgetUpdate(amount=650))

        self.assertEqual(row["category"]["name"], "Groceries")
        self.assertEqual(self.db.queries_for("budgets", "update")[0].payload, {"amount": 650})

    def test_update_attaches_new_category(self):
        self.db.queue("budgets", [make_budget()])
        self.db.queue("categories", [RENT])
        self.db.queue("budgets", [{**make_budget(category=RENT), "category": None}])

        row = budget_service.update_budget(self.db, USER_ID, "b1", BudgetUpdate(category_id=RENT["id"]))

        self.assertEqual(row["category"]["id"], RENT["id"])

    def test_clearing_end_date_writes_null(self):
        self.db.queue("budgets", [make_budget()])
        self.db.queue("budgets", [make_budget(end=None)])

        budget_service.update_budget(self.db, USER_ID, "b1", BudgetUpdate(end_date=None))

        self.assertEqual(self.db.queries_for("budgets", "update")[0].payload, {"end_date": None})

    def test_update_rejects_null_required_columns(self):
        for field in ("category_id", "amount", "period", "start_date"):
            with self.subTest(field=field), self.assertRaises(ValueError):
                BudgetUpdate.model_validate({field: None})

    def test_update_checks_new_category(self):
        self.db.queue("budgets", [make_budget()])
        self.db.queue("categories", [SALARY])

        with self.assertRaises(InvariantError):
            budget_service.update_budget(self.db, USER_ID, "b1", BudgetUpdate(category_id=SALARY["id"]))

    def test_update_rejects_end_before_start(self):
        self.db.queue("budgets", [make_budget()])
        with self.assertRaises(InvariantError):
            budget_service.update_budget(self.db, USER_ID, "b1", BudgetUpdate(end_date=date(2024, 2, 1)))

    def test_empty_update(self):
        with self.assertRaises(InvariantError):
            budget_service.update_budget(self.db, USER_ID, "b1", BudgetUpdate())

    def test_database_failure_is_wrapped(self):
        self.db.queue("budgets", error=api_error("permission denied"))
        with self.assertRaisesRegex(DatabaseError, "permission denied"):
            budget_service.list_budgets(self.db, USER_ID)


class TestBudgetStats(BaseTestCase):

    def test_stats_mid_period(self):
        rows = [tx(100, day="2024-03-02"), tx(150, day="2024-03-09")]
        stats = budget_service.compute_budget_stats(make_budget(), rows, TODAY)

        self.assertEqual(stats.spent_amount, 250)
        self.assertEqual(stats.remaining_amount, 250)
        self.assertEqual(stats.spent_percentage, 50)
        self.assertEqual(stats.transaction_count, 2)
        self.assertFalse(stats.is_over_budget)
        self.assertEqual(stats.days_remaining, 16)
        self.assertAlmostEqual(stats.daily_average, 250 / 15)
        self.assertAlmostEqual(stats.projected_spending, 250 / 15 * 31)

    def test_stats_after_period(self):
        stats = with_spending(make_budget(), 600, today=date(2024, 5, 1))
        self.assertEqual(stats.days_remaining, 0)
        self.assertTrue(stats.is_over_budget)
        self.assertEqual(stats.remaining_amount, -100)
        self.assertAlmostEqual(stats.spent_percentage, 120)
        self.assertAlmostEqual(stats.daily_average, 600 / 31)

    def test_list_with_stats_queries_expenses_per_budget(self):
        self.db.queue("budgets", [make_budget("b1", GROCERIES), make_budget("b2", RENT, amount=100)])
        self.db.queue("transactions", [tx(50)])
        self.db.queue("transactions", [tx(150, category=RENT)])

        results = budget_service.list_budgets_with_stats(
            self.db, USER_ID, BudgetFilters(over_budget=True), TODAY
        )

        self.assertEqual([b.id for b in results], ["b2"])
        queries = self.db.queries_for("transactions")
        self.assertEqual(len(queries), 2)
        self.assertEqual(queries[0].filters()["type"], "expense")
        self.assertEqual(queries[0].filters()["category_id"], GROCERIES["id"])
        self.assertEqual(queries[0].filters("gte")["date"], "2024-03-01")
        self.assertEqual(queries[0].filters("lte")["date"], "2024-03-31")

    def test_status_filter(self):
        self.db.queue("budgets", [
            make_budget("b1"),
            make_budget("b2", start="2024-01-01", end="2024-01-31"),
        ])
        budgets = budget_service.list_budgets(self.db, USER_ID, BudgetFilters(status="expired"), TODAY)
        self.assertEqual([b["id"] for b in budgets], ["b2"])

    def test_overview_counts_active_budgets(self):
        self.db.queue("budgets", [
            make_budget("b1", amount=500),
            make_budget("b2", RENT, amount=100),
            make_budget("b3", start="2023-01-01", end="2023-01-31"),
        ])
        self.db.queue("transactions", [tx(200)])
        self.db.queue("transactions", [tx(150, category=RENT)])

        overview = budget_service.budget_overview(self.db, USER_ID, TODAY)

        self.assertEqual(overview.total_budgets, 2)
        self.assertEqual(overview.active_budgets, 2)
        self.assertEqual(overview.total_budget_amount, 600)
        self.assertEqual(overview.total_spent, 350)
        self.assertEqual(overview.over_budget_count, 1)


class TestBudgetInsights(BaseTestCase):

    def setUp(self):
        super().setUp()
        self.over = with_spending(make_budget("b1", GROCERIES, 500), 600)
        self.near = with_spending(make_budget("b2", RENT, 1000), 850)
        self.underused = with_spending(make_budget("b3", FUN, 200), 20)

    def test_alerts_and_recommendations(self):
        report = budget_service.budget_insights([self.over, self.near, self.underused], TODAY, "USD")

        self.assertEqual(
            [(i.type, i.priority, i.category) for i in report.insights],
            [("alert", "high", "Groceries"), ("alert", "medium", "Rent"), ("recommendation", "low", "Fun")],
        )
        self.assertEqual(
            report.insights[0].description,
            "You've spent $600.00 of your $500.00 budget (120%)",
        )
        self.assertEqual(report.analytics.total_budgeted, 1700)
        self.assertEqual(report.analytics.total_spent, 1470)
        self.assertEqual(report.analytics.over_budget_count, 1)
        self.assertEqual(report.analytics.under_utilized_count, 1)
        self.assertEqual(report.analytics.savings_total, 330)
        self.assertAlmostEqual(report.analytics.average_utilization, (120 + 85 + 10) / 3)

    def test_december_tips(self):
        budgets = [
            with_spending(make_budget("b1", GROCERIES, 500), 300),
            with_spending(make_budget("b2", RENT, 1000), 600),
            with_spending(make_budget("b3", FUN, 200), 100),
        ]
        report = budget_service.budget_insights(budgets, date(2024, 12, 5))

        titles = [i.title for i in report.insights]
        self.assertEqual(titles, ["Great budgeting discipline!", "Holiday season budgeting"])

    def test_many_underutilized_budgets(self):
        budgets = [with_spending(make_budget(f"b{i}", FUN, 100), 40) for i in range(3)]
        report = budget_service.budget_insights(budgets, TODAY)
        self.assertIn("Multiple underutilized budgets", [i.title for i in report.insights])

    def test_no_budgets(self):
        report = budget_service.budget_insights([], TODAY)
        self.assertEqual(report.insights, [])
        self.assertEqual(report.analytics.total_budgeted, 0)

    def test_optimizations(self):
        high = with_spending(make_budget("b4", GROCERIES, 100), 97)
        report = budget_service.budget_optimizations([self.over, self.near, self.underused, high])

        by_id = {o.budget_id: o for o in report.optimizations}
        self.assertEqual(sorted(by_id), ["b1", "b3", "b4"])

        self.assertEqual(by_id["b1"].suggested_amount, 660)
        self.assertEqual(by_id["b1"].potential_savings, 0)
        self.assertEqual(by_id["b3"].suggested_amount, 24)
        self.assertEqual(by_id["b3"].reasoning, "Reduce budget by 88% based on low utilization")
        self.assertEqual(by_id["b3"].potential_savings, 176)
        self.assertEqual(by_id["b4"].suggested_amount, 115)

        self.assertEqual(report.total_potential_savings, 176)
        self.assertTrue(report.has_optimizations)


class TestBudgetRecommendations(BaseTestCase):

    def test_recommendations_from_recent_spending(self):
        rows = [
            tx(300, category=GROCERIES),
            tx(150, category=GROCERIES),
            tx(3000, category=RENT),
            {"amount": 80, "type": "expense", "category": None},
        ]
        recommendations = budget_service.recommend_budgets(rows, currency="USD")

        self.assertEqual([r.category_name for r in recommendations], ["Rent", "Groceries"])
        rent, groceries = recommendations
        self.assertEqual(rent.monthly_average, 1000)
        self.assertEqual(rent.suggested_budget, 1100)
        self.assertEqual(groceries.suggested_budget, 165)
        self.assertEqual(groceries.transaction_count, 2)
        self.assertEqual(
            rent.reasoning,
            "Based on your last 3 months of spending ($1,000.00 average), "
            "we suggest a budget of $1,100 with a 10% buffer.",
        )

    def test_recommendations_query_last_90_days(self):
        self.db.queue("transactions", [tx(90)])

        recommendations = budget_service.budget_recommendations(self.db, USER_ID, TODAY)

        query = self.db.queries_for("transactions")[0]
        self.assertEqual(query.filters("gte")["date"], "2023-12-16")
        self.assertEqual(query.filters("lte")["date"], "2024-03-15")
        self.assertEqual(query.filters()["type"], "expense")
        self.assertEqual(query.called("limit"), [((500,), {})])
        self.assertEqual(recommendations[0].monthly_average, 30)

    def test_recommendations_use_the_given_currency(self):
        self.db.queue("transactions", [tx(90)])

        recommendations = budget_service.budget_recommendations(self.db, USER_ID, TODAY, currency="EUR")

        self.assertIn("€30.00 average", recommendations[0].reasoning)
