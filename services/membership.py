"""会员生命周期服务模块 - 注册、签到、续费、终止与到期提醒"""
import datetime
from dataclasses import dataclass
from enum import Enum
from typing import List
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from models import Member, Plan, Payment, ExpiryNotice
from models.entities import STATUS_ACTIVE, STATUS_EXPIRED
from config import config, get_logger
from utils.exceptions import NotFoundError, InvalidPlanError, ValidationError
from utils.helpers import generate_password, day_bounds
from utils.transaction import transaction_scope
from .auth import AuthService
from .events import MembershipExpiring

logger = get_logger(__name__)


def derive_status(expiry_date: datetime.datetime, now: datetime.datetime) -> str:
    """会员状态只由到期时间和当前时间决定"""
    return STATUS_ACTIVE if expiry_date >= now else STATUS_EXPIRED


class CheckInOutcome(Enum):
    ADMITTED = "admitted"
    DENIED = "denied"


@dataclass(frozen=True)
class NewMemberCredentials:
    member_id: int
    generated_password: str


@dataclass(frozen=True)
class CheckInResult:
    member_id: int
    name: str
    outcome: CheckInOutcome
    expiry_date: datetime.datetime

    @property
    def admitted(self) -> bool:
        return self.outcome is CheckInOutcome.ADMITTED


class MembershipService:
    def __init__(self, ledger, membership_days: int = None):
        self.ledger = ledger
        self.membership_days = membership_days or config.MEMBERSHIP_DAYS

    @property
    def clock(self):
        return self.ledger.clock

    @staticmethod
    def _get_member(s, member_id: int) -> Member:
        member = s.get(Member, member_id)
        if member is None or member.is_deleted:
            raise NotFoundError(f"会员 {member_id} 不存在")
        return member

    @staticmethod
    def _get_plan(s, plan_id: int) -> Plan:
        plan = s.get(Plan, plan_id) if plan_id is not None else None
        if plan is None:
            raise InvalidPlanError(f"套餐 {plan_id} 不存在")
        return plan

    # ---------- 注册 ----------
    def register(self, name: str, email: str, plan_id: int) -> NewMemberCredentials:
        if not name or not name.strip():
            raise ValidationError("会员姓名必填")
        if not email or not email.strip():
            raise ValidationError("邮箱必填")
        password = generate_password(config.PASSWORD_LENGTH)
        password_hash = AuthService.hash_password(password)
        with self.ledger.serialized_scope() as (s, _):
            plan = self._get_plan(s, plan_id)
            now = self.clock()
            member = Member(
                name=name.strip(), email=email.strip(), plan_id=plan.id,
                password_hash=password_hash,
                expiry_date=now + datetime.timedelta(days=self.membership_days),
                status=STATUS_ACTIVE, created_at=now
            )
            s.add(member)
            s.flush()
            self.ledger.record_payment(s, member.id, plan.price, remark=f"注册: {plan.name}")
        logger.info(f"新会员注册: id={member.id}, 套餐={plan.name}")
        return NewMemberCredentials(member_id=member.id, generated_password=password)

    # ---------- 签到 ----------
    def check_in(self, member_id: int) -> CheckInResult:
        """签到校验，同时按到期日修正并保存会员状态（与续费串行，避免写回过期状态）"""
        with self.ledger.serialized_scope() as (s, _):
            member = self._get_member(s, member_id)
            member.status = derive_status(member.expiry_date, self.clock())
            outcome = CheckInOutcome.ADMITTED if member.status == STATUS_ACTIVE else CheckInOutcome.DENIED
            result = CheckInResult(member_id=member.id, name=member.name, outcome=outcome,
                                   expiry_date=member.expiry_date)
        logger.info(f"会员签到: id={member_id}, 结果={outcome.value}")
        return result

    # ---------- 续费 ----------
    def renew(self, member_id: int, plan_id: int) -> datetime.datetime:
        """续费：已过期会员从当前时间起算，未过期会员在原到期日上顺延"""
        with self.ledger.serialized_scope() as (s, _):
            member = self._get_member(s, member_id)
            plan = self._get_plan(s, plan_id)
            now = self.clock()
            start = max(now, member.expiry_date)
            member.plan_id = plan.id
            member.expiry_date = start + datetime.timedelta(days=self.membership_days)
            member.status = STATUS_ACTIVE
            self.ledger.record_payment(s, member.id, plan.price, remark=f"续费: {plan.name}")
            new_expiry = member.expiry_date
        logger.info(f"会员续费: id={member_id}, 新到期日={new_expiry:%Y-%m-%d}")
        return new_expiry

    # ---------- 终止 ----------
    def terminate(self, member_id: int):
        """终止会员资格（软删除，保留缴费记录）"""
        with transaction_scope(self.ledger.session_factory) as (s, _):
            member = self._get_member(s, member_id)
            member.is_deleted = True
            member.terminated_at = self.clock()
        logger.info(f"终止会员: id={member_id}")

    # ---------- 到期提醒 ----------
    def process_daily_expirations(self) -> List[MembershipExpiring]:
        """
        查找明天到期的有效会员并发布 MembershipExpiring 事件。
        同一会员同一天只提醒一次（ExpiryNotice 去重）。
        """
        now = self.clock()
        today = now.date()
        start, end = day_bounds(today + datetime.timedelta(days=1))
        events = []
        with self.ledger.serialized_scope() as (s, outbox):
            members = s.query(Member).filter(
                Member.is_deleted.is_(False),
                Member.expiry_date >= start,
                Member.expiry_date < end
            ).order_by(Member.id).all()
            notified = {mid for (mid,) in s.query(ExpiryNotice.member_id).filter_by(notice_date=today)}
            for m in members:
                if derive_status(m.expiry_date, now) != STATUS_ACTIVE or m.id in notified:
                    continue
                s.add(ExpiryNotice(member_id=m.id, notice_date=today, created_at=now))
                events.append(MembershipExpiring(member_id=m.id, name=m.name, email=m.email))
            outbox.extend(events)
        logger.info(f"到期提醒: {len(events)} 位会员明天到期")
        return events

    # ---------- 查询 ----------
    def get_member(self, member_id: int) -> Member:
        s = self.ledger.session_factory()
        try:
            member = s.query(Member).options(joinedload(Member.plan)).filter_by(id=member_id).first()
            if member is None or member.is_deleted:
                raise NotFoundError(f"会员 {member_id} 不存在")
            return member
        finally:
            s.close()

    def list_members(self) -> List[Member]:
        s = self.ledger.session_factory()
        try:
            return s.query(Member).options(joinedload(Member.plan)).filter(
                Member.is_deleted.is_(False)).order_by(Member.id).all()
        finally:
            s.close()

    def active_member_count(self) -> int:
        """按到期日计算的有效会员数"""
        s = self.ledger.session_factory()
        try:
            return s.query(Member).filter(Member.is_deleted.is_(False),
                                          Member.expiry_date >= self.clock()).count()
        finally:
            s.close()

    def unpaid_members(self) -> List[Member]:
        """近一个月没有缴费记录的有效会员"""
        now = self.clock()
        since = now - datetime.timedelta(days=config.RECENT_PAYMENT_DAYS)
        s = self.ledger.session_factory()
        try:
            paid = select(Payment.member_id).where(Payment.created_at >= since,
                                                   Payment.member_id.isnot(None))
            return s.query(Member).filter(
                Member.is_deleted.is_(False),
                Member.expiry_date >= now,
                Member.id.notin_(paid)
            ).order_by(Member.id).all()
        finally:
            s.close()

    def trainer_roster(self) -> List[Member]:
        """套餐包含私教的有效会员"""
        s = self.ledger.session_factory()
        try:
            return s.query(Member).options(joinedload(Member.plan)).join(Plan).filter(
                Member.is_deleted.is_(False),
                Member.expiry_date >= self.clock(),
                Plan.includes_trainer.is_(True)
            ).order_by(Member.id).all()
        finally:
            s.close()

    def payment_history(self, member_id: int) -> List[Payment]:
        s = self.ledger.session_factory()
        try:
            self._get_member(s, member_id)
            return s.query(Payment).filter_by(member_id=member_id).order_by(
                Payment.created_at.desc(), Payment.id.desc()).all()
        finally:
            s.close()

    # ---------- 套餐 ----------
    def available_plans(self) -> List[Plan]:
        s = self.ledger.session_factory()
        try:
            return s.query(Plan).order_by(Plan.id).all()
        finally:
            s.close()

    def get_plan(self, plan_id: int) -> Plan:
        s = self.ledger.session_factory()
        try:
            return self._get_plan(s, plan_id)
        finally:
            s.close()

    def add_plan(self, name: str, price, includes_trainer: bool = False,
                 includes_supplements: bool = False) -> Plan:
        if not name or not name.strip():
            raise ValidationError("套餐名称必填")
        if float(price) <= 0:
            raise ValidationError("套餐价格必须大于0")
        try:
            with transaction_scope(self.ledger.session_factory) as (s, _):
                plan = Plan(name=name.strip(), price=float(price), includes_trainer=includes_trainer,
                            includes_supplements=includes_supplements)
                s.add(plan)
        except IntegrityError:
            raise ValidationError(f"套餐 {name} 已存在")
        logger.info(f"新增套餐: {name}, 价格={price}")
        return plan
