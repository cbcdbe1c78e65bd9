"""工资发放测试"""
import threading
from decimal import Decimal
import pytest

from conftest import add_revenue, count_rows
from models import Expense, SalaryPayment
from services import EventType
from utils.exceptions import InsufficientFundsError, NotFoundError, ValidationError


@pytest.fixture
def trainer(svc):
    return svc.staff.hire("Sam Trainer", "Trainer", 80, "sam", "secret")


class TestPaySalary:
    """工资发放幂等性测试"""

    def test_first_payment_writes_salary_and_expense(self, svc, trainer):
        add_revenue(svc, 500)
        result = svc.payroll.pay_salary(trainer.id)

        assert result.already_paid is False
        assert result.period == "2026-03"
        assert result.year == "2026"
        assert result.amount == Decimal("80")
        assert count_rows(svc.ledger.session_factory, SalaryPayment) == 1
        expenses = svc.ledger.expenses()
        assert len(expenses) == 1
        assert expenses[0].expense_type == "Salary"
        assert "2026-03" in expenses[0].description

    def test_second_payment_in_same_period_is_noop(self, svc, trainer, clock):
        add_revenue(svc, 500)
        svc.payroll.pay_salary(trainer.id)
        balance = svc.ledger.summary().available_balance

        clock.advance(days=5)
        result = svc.payroll.pay_salary(trainer.id)

        assert result.already_paid is True
        assert count_rows(svc.ledger.session_factory, SalaryPayment) == 1
        assert count_rows(svc.ledger.session_factory, Expense) == 1
        assert svc.ledger.summary().available_balance == balance

    def test_repeat_payment_still_checks_balance(self, svc, trainer):
        """余额只够一次发放时，重复发放先触发余额不足"""
        events = []
        svc.bus.subscribe(EventType.SALARY_PAID, events.append)
        add_revenue(svc, 80)
        svc.payroll.pay_salary(trainer.id)
        assert svc.ledger.summary().available_balance == 0

        with pytest.raises(InsufficientFundsError) as exc:
            svc.payroll.pay_salary(trainer.id)

        assert exc.value.available == Decimal("0")
        assert exc.value.required == Decimal("80")
        assert count_rows(svc.ledger.session_factory, SalaryPayment) == 1
        assert count_rows(svc.ledger.session_factory, Expense) == 1
        assert [e.already_paid for e in events] == [False]

    def test_next_month_is_a_new_period(self, svc, trainer, clock):
        add_revenue(svc, 500)
        svc.payroll.pay_salary(trainer.id)
        clock.advance(days=31)
        result = svc.payroll.pay_salary(trainer.id)
        assert result.already_paid is False
        assert result.period == "2026-04"
        assert len(svc.payroll.salary_history(trainer.id)) == 2

    def test_insufficient_funds_writes_nothing(self, svc, trainer):
        add_revenue(svc, 50)
        with pytest.raises(InsufficientFundsError) as exc:
            svc.payroll.pay_salary(trainer.id)
        assert exc.value.available == Decimal("50")
        assert exc.value.required == Decimal("80")
        assert count_rows(svc.ledger.session_factory, SalaryPayment) == 0
        assert count_rows(svc.ledger.session_factory, Expense) == 0

    def test_unknown_staff(self, svc):
        with pytest.raises(NotFoundError):
            svc.payroll.pay_salary(999)

    def test_terminated_staff_cannot_be_paid(self, svc, trainer):
        add_revenue(svc, 500)
        svc.staff.terminate(trainer.id)
        with pytest.raises(ValidationError):
            svc.payroll.pay_salary(trainer.id)


class TestSalaryEvents:
    """工资事件测试"""

    def test_event_distinguishes_payment_from_notice(self, svc, trainer):
        events = []
        svc.bus.subscribe(EventType.SALARY_PAID, events.append)
        add_revenue(svc, 500)

        svc.payroll.pay_salary(trainer.id)
        svc.payroll.pay_salary(trainer.id)

        assert [e.already_paid for e in events] == [False, True]
        assert events[0].staff_id == trainer.id
        assert events[0].name == "Sam Trainer"
        assert events[0].amount == Decimal("80")
        assert events[0].period == "2026-03"

    def test_failing_subscriber_keeps_payment(self, svc, trainer):
        def broken(event):
            raise RuntimeError("mail server down")

        received = []
        svc.bus.subscribe(EventType.SALARY_PAID, broken)
        svc.bus.subscribe(EventType.SALARY_PAID, received.append)
        add_revenue(svc, 500)

        result = svc.payroll.pay_salary(trainer.id)

        assert result.already_paid is False
        assert len(received) == 1
        assert count_rows(svc.ledger.session_factory, SalaryPayment) == 1


class TestConcurrentPayroll:
    """并发发放测试"""

    def test_concurrent_payments_pay_once(self, svc, trainer):
        add_revenue(svc, 1000)
        results = []
        errors = []

        def worker():
            try:
                results.append(svc.payroll.pay_salary(trainer.id))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sum(1 for r in results if not r.already_paid) == 1
        assert count_rows(svc.ledger.session_factory, SalaryPayment) == 1
        assert count_rows(svc.ledger.session_factory, Expense) == 1
        assert svc.ledger.summary().available_balance == Decimal("920")


class TestSalaryStatus:
    """工资状态查询测试"""

    def test_status_lists_active_staff_with_paid_flag(self, svc, trainer):
        other = svc.staff.hire("Rita", "Receptionist", 40, "rita", "pw")
        gone = svc.staff.hire("Gone", "Trainer", 40, "gone", "pw")
        svc.staff.terminate(gone.id)
        add_revenue(svc, 500)
        svc.payroll.pay_salary(trainer.id)

        status = {row["staff"].id: row["paid"] for row in svc.payroll.salary_status()}
        assert status == {trainer.id: True, other.id: False}

    def test_history_is_per_staff(self, svc, trainer, clock):
        clerk = svc.staff.hire("Rita", "Receptionist", 40, "rita", "pw")
        add_revenue(svc, 500)
        svc.payroll.pay_salary(trainer.id)
        svc.payroll.pay_salary(clerk.id)
        clock.advance(days=31)
        svc.payroll.pay_salary(trainer.id)
        svc.staff.terminate(clerk.id)

        by_staff = {s.id: svc.payroll.salary_history(s.id) for s in svc.staff.list_all()}
        assert [p.period for p in by_staff[trainer.id]] == ["2026-04", "2026-03"]
        assert [p.amount for p in by_staff[clerk.id]] == [40.0]
        assert len(svc.payroll.all_salary_payments()) == 3

    def test_terminated_staff_history_survives(self, svc, trainer):
        add_revenue(svc, 500)
        svc.payroll.pay_salary(trainer.id)
        svc.staff.terminate(trainer.id)
        assert len(svc.payroll.salary_history(trainer.id)) == 1
        assert len(svc.payroll.all_salary_payments()) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
