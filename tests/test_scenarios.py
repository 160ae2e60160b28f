"""Tests for the loan book scenario."""

from datetime import datetime
from decimal import Decimal

from loan_tracker.config import SeedConfig
from loan_tracker.engine.status import is_overdue
from loan_tracker.origination import get_full_borrower
from loan_tracker.scenarios import LoanBookScenario
from loan_tracker.store import InMemoryLoanStore


class TestLoanBookScenario:
    """Tests for LoanBookScenario."""

    def test_generate_scenario(self, seed: int, now: datetime) -> None:
        scenario = LoanBookScenario(num_borrowers=3, num_loans=7, seed=seed, now=now)
        store = scenario.generate()

        summary = store.summary()
        assert summary["borrowers"] == 3
        assert summary["loans"] == 7
        assert summary["installments"] == sum(loan.term_months for loan in store.list_loans())

    def test_loans_spread_across_borrowers(self, seed: int, now: datetime) -> None:
        scenario = LoanBookScenario(num_borrowers=3, num_loans=7, seed=seed, now=now)
        store = scenario.generate()

        counts = [len(store.get_loans_by_borrower(bid)) for bid in scenario.borrower_ids]
        assert counts == [3, 2, 2]

    def test_every_borrower_gets_a_loan(self, seed: int, now: datetime) -> None:
        scenario = LoanBookScenario(num_borrowers=4, num_loans=2, seed=seed, now=now)
        store = scenario.generate()

        assert store.summary()["loans"] == 4
        assert [scenario.loans_for(i) for i in range(4)] == [1, 1, 1, 1]

    def test_auto_settle_leaves_nothing_overdue(self, seed: int, now: datetime) -> None:
        scenario = LoanBookScenario(num_borrowers=2, num_loans=4, seed=seed, now=now)
        store = scenario.generate()

        for installment in store.list_installments():
            assert not is_overdue(installment, now)

    def test_without_auto_settle(self, seed: int, now: datetime) -> None:
        scenario = LoanBookScenario(
            num_borrowers=2, num_loans=2, auto_settle_past_due=False, seed=seed, now=now
        )
        store = scenario.generate()

        assert all(i.paid_date is None for i in store.list_installments())

    def test_config_overrides_arguments(self, seed: int, now: datetime) -> None:
        config = SeedConfig(num_borrowers=2, num_loans=3)
        scenario = LoanBookScenario(num_borrowers=10, num_loans=50, seed=seed, config=config, now=now)

        store = scenario.generate()

        assert store.summary()["borrowers"] == 2
        assert store.summary()["loans"] == 3

    def test_uses_given_repository(self, seed: int, now: datetime) -> None:
        store = InMemoryLoanStore()

        result = LoanBookScenario(num_borrowers=1, num_loans=1, seed=seed, repository=store, now=now).generate()

        assert result is store
        assert store.count_borrowers() == 1

    def test_loans_taken_in_the_past(self, seed: int, now: datetime) -> None:
        scenario = LoanBookScenario(num_borrowers=2, num_loans=6, seed=seed, now=now)
        store = scenario.generate()

        for borrower_id in scenario.borrower_ids:
            for loan in get_full_borrower(store, borrower_id).loans:
                assert loan.date_taken < now
                assert len(loan.installments) == loan.term_months

    def test_portfolio_summary(self, seed: int, now: datetime) -> None:
        scenario = LoanBookScenario(num_borrowers=2, num_loans=3, seed=seed, max_backdate_days=30, now=now)
        scenario.generate()

        summary = scenario.get_portfolio_summary()

        assert summary["total_loans"] == 3
        assert summary["total_principal"] > Decimal("0")
        assert summary["loan_status_distribution"] == {"active": 3}
        assert summary["installments"] == scenario.repository.summary()["installments"]
        assert summary["installments_overdue"] == 0
        assert 0 < summary["outstanding_balance"]

    def test_portfolio_summary_before_generate(self, seed: int) -> None:
        assert LoanBookScenario(seed=seed).get_portfolio_summary() == {}
