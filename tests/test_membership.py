"""会员生命周期测试"""
import datetime
import threading
from decimal import Decimal
import pytest

from conftest import count_rows
from models import Member, Payment
from services import CheckInOutcome, EventType, derive_status
from utils.exceptions import InvalidPlanError, LedgerBusyError, NotFoundError, ValidationError


def _stored_status(svc, member_id):
    s = svc.ledger.session_factory()
    try:
        return s.get(Member, member_id).status
    finally:
        s.close()


class TestRegistration:
    """会员注册测试"""

    def test_register_creates_member_and_payment(self, svc, basic_plan, clock):
        creds = svc.membership.register("Alice", "alice@example.com", basic_plan.id)

        member = svc.membership.get_member(creds.member_id)
        assert member.expiry_date == clock.now + datetime.timedelta(days=30)
        assert member.status == "Active"
        assert member.plan.name == "Basic"
        assert len(creds.generated_password) == 8
        assert creds.generated_password.isalnum() and creds.generated_password.upper() == creds.generated_password

        history = svc.membership.payment_history(creds.member_id)
        assert [p.amount for p in history] == [50.0]
        assert svc.ledger.summary().total_revenue == Decimal("50")

    def test_generated_password_is_stored_hashed(self, svc, basic_plan):
        creds = svc.membership.register("Alice", "alice@example.com", basic_plan.id)
        stored = svc.membership.get_member(creds.member_id).password_hash
        assert stored != creds.generated_password
        assert svc.auth.check_password(creds.generated_password, stored)
        assert not svc.auth.check_password("WRONG", stored)

    def test_invalid_plan_writes_nothing(self, svc):
        with pytest.raises(InvalidPlanError):
            svc.membership.register("Bob", "bob@example.com", 99)
        assert count_rows(svc.ledger.session_factory, Member) == 0
        assert count_rows(svc.ledger.session_factory, Payment) == 0

    def test_blank_name_rejected(self, svc, basic_plan):
        with pytest.raises(ValidationError):
            svc.membership.register("  ", "x@example.com", basic_plan.id)


class TestCheckIn:
    """签到校验测试"""

    def test_active_member_admitted(self, svc, basic_plan):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        result = svc.membership.check_in(creds.member_id)
        assert result.outcome is CheckInOutcome.ADMITTED
        assert result.admitted

    def test_expired_member_denied_and_status_repaired(self, svc, basic_plan, clock):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        clock.advance(days=31)
        result = svc.membership.check_in(creds.member_id)
        assert result.outcome is CheckInOutcome.DENIED
        assert _stored_status(svc, creds.member_id) == "Expired"

    def test_stale_expired_status_is_not_trusted(self, svc, basic_plan):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        s = svc.ledger.session_factory()
        try:
            s.get(Member, creds.member_id).status = "Expired"
            s.commit()
        finally:
            s.close()
        assert svc.membership.check_in(creds.member_id).admitted
        assert _stored_status(svc, creds.member_id) == "Active"

    def test_expiry_moment_itself_is_still_valid(self, svc, basic_plan, clock):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        clock.advance(days=30)
        assert svc.membership.check_in(creds.member_id).admitted

    def test_unknown_member(self, svc):
        with pytest.raises(NotFoundError):
            svc.membership.check_in(123)

    def test_check_in_is_ordered_with_ledger_writes(self, session_factory, clock):
        """续费等写入持有账本锁时，签到不会并行写回会员状态"""
        from services import build_services
        svc = build_services(session_factory, clock=clock, lock_timeout=0.1)
        plan = svc.membership.add_plan("Basic", 50.0)
        creds = svc.membership.register("Alice", "a@example.com", plan.id)
        held = threading.Event()
        release = threading.Event()

        def renewal_in_progress():
            with svc.ledger.serialized_scope():
                held.set()
                release.wait(5)

        t = threading.Thread(target=renewal_in_progress)
        t.start()
        try:
            assert held.wait(5)
            with pytest.raises(LedgerBusyError):
                svc.membership.check_in(creds.member_id)
        finally:
            release.set()
            t.join()
        assert svc.membership.check_in(creds.member_id).admitted

    def test_derive_status(self):
        now = datetime.datetime(2026, 1, 1, 12, 0)
        assert derive_status(now, now) == "Active"
        assert derive_status(now - datetime.timedelta(seconds=1), now) == "Expired"


class TestRenewal:
    """续费测试"""

    def test_active_member_extends_from_current_expiry(self, svc, basic_plan, clock):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        expiry = svc.membership.get_member(creds.member_id).expiry_date
        clock.advance(days=10)
        new_expiry = svc.membership.renew(creds.member_id, basic_plan.id)
        assert new_expiry == expiry + datetime.timedelta(days=30)

    def test_lapsed_member_extends_from_now(self, svc, basic_plan, clock):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        clock.advance(days=100)
        new_expiry = svc.membership.renew(creds.member_id, basic_plan.id)
        assert new_expiry == clock.now + datetime.timedelta(days=30)
        assert _stored_status(svc, creds.member_id) == "Active"

    def test_renewal_never_decreases_expiry(self, svc, basic_plan, clock):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        previous = svc.membership.get_member(creds.member_id).expiry_date
        for days in (5, 40, 0, 90):
            clock.advance(days=days)
            current = svc.membership.renew(creds.member_id, basic_plan.id)
            assert current >= previous
            previous = current

    def test_renewal_switches_plan_and_charges_new_price(self, svc, basic_plan, trainer_plan):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        svc.membership.renew(creds.member_id, trainer_plan.id)
        member = svc.membership.get_member(creds.member_id)
        assert member.plan_id == trainer_plan.id
        assert svc.ledger.summary().total_revenue == Decimal("170")

    def test_renew_errors(self, svc, basic_plan):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        with pytest.raises(NotFoundError):
            svc.membership.renew(999, basic_plan.id)
        with pytest.raises(InvalidPlanError):
            svc.membership.renew(creds.member_id, 999)
        assert len(svc.membership.payment_history(creds.member_id)) == 1


class TestTermination:
    """终止会员测试"""

    def test_termination_keeps_payment_history(self, svc, basic_plan):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        svc.membership.terminate(creds.member_id)

        assert svc.membership.list_members() == []
        assert count_rows(svc.ledger.session_factory, Payment) == 1
        assert svc.ledger.summary().total_revenue == Decimal("50")
        with pytest.raises(NotFoundError):
            svc.membership.check_in(creds.member_id)
        with pytest.raises(NotFoundError):
            svc.membership.terminate(creds.member_id)


class TestDailyExpirations:
    """到期提醒测试"""

    def test_notifies_members_expiring_tomorrow_once_per_day(self, svc, basic_plan, clock):
        received = []
        svc.bus.subscribe(EventType.MEMBERSHIP_EXPIRING, received.append)
        first = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        clock.advance(days=3)
        svc.membership.register("Later", "l@example.com", basic_plan.id)

        clock.advance(days=26)  # 第一位会员明天到期
        events = svc.membership.process_daily_expirations()
        assert [e.member_id for e in events] == [first.member_id]
        assert received == events
        assert received[0].email == "a@example.com"

        clock.advance(hours=2)
        assert svc.membership.process_daily_expirations() == []
        assert len(received) == 1

    def test_terminated_members_are_skipped(self, svc, basic_plan, clock):
        creds = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        svc.membership.terminate(creds.member_id)
        clock.advance(days=29)
        assert svc.membership.process_daily_expirations() == []

    def test_no_subscribers_is_not_an_error(self, svc, basic_plan, clock):
        svc.membership.register("Alice", "a@example.com", basic_plan.id)
        clock.advance(days=29)
        assert len(svc.membership.process_daily_expirations()) == 1


class TestPlans:
    """套餐管理测试"""

    def test_duplicate_plan_name_is_a_validation_error(self, svc, basic_plan):
        with pytest.raises(ValidationError):
            svc.membership.add_plan("Basic", 60.0)
        plans = svc.membership.available_plans()
        assert [(p.name, p.price) for p in plans] == [("Basic", 50.0)]

    def test_plan_validation(self, svc):
        with pytest.raises(ValidationError):
            svc.membership.add_plan(" ", 10.0)
        with pytest.raises(ValidationError):
            svc.membership.add_plan("Free", 0)


class TestMemberQueries:
    """会员查询测试"""

    def test_active_count_uses_expiry_not_stored_status(self, svc, basic_plan, clock):
        svc.membership.register("Alice", "a@example.com", basic_plan.id)
        clock.advance(days=20)
        svc.membership.register("Bob", "b@example.com", basic_plan.id)
        assert svc.membership.active_member_count() == 2
        clock.advance(days=15)
        assert svc.membership.active_member_count() == 1

    def test_unpaid_members(self, svc, basic_plan, clock):
        old = svc.membership.register("Alice", "a@example.com", basic_plan.id)
        svc.membership.renew(old.member_id, basic_plan.id)
        clock.advance(days=35)
        fresh = svc.membership.register("Bob", "b@example.com", basic_plan.id)
        assert [m.id for m in svc.membership.unpaid_members()] == [old.member_id]
        assert fresh.member_id not in [m.id for m in svc.membership.unpaid_members()]

    def test_trainer_roster(self, svc, basic_plan, trainer_plan):
        svc.membership.register("Alice", "a@example.com", basic_plan.id)
        gold = svc.membership.register("Gina", "g@example.com", trainer_plan.id)
        roster = svc.membership.trainer_roster()
        assert [m.id for m in roster] == [gold.member_id]
        assert roster[0].plan.name == "Gold"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
