"""工资发放服务模块"""
from dataclasses import dataclass
from decimal import Decimal
from typing import List
from sqlalchemy.exc import IntegrityError
from models import Staff, SalaryPayment
from models.entities import EXPENSE_SALARY
from config import get_logger
from utils.exceptions import NotFoundError, ValidationError
from utils.helpers import to_decimal, period_key
from .events import SalaryPaid

logger = get_logger(__name__)


@dataclass(frozen=True)
class SalaryPaymentResult:
    staff_id: int
    staff_name: str
    amount: Decimal
    period: str
    year: str
    already_paid: bool


class PayrollService:
    def __init__(self, ledger):
        self.ledger = ledger

    def pay_salary(self, staff_id: int) -> SalaryPaymentResult:
        """
        发放当月工资。先校验余额（不足时抛出 InsufficientFundsError），
        同一员工同一账期至多一条工资记录：已发放时直接返回
        already_paid=True 且不产生任何写入；否则在同一事务内写入工资记录和对应支出。
        两种情况都会在提交后发布 SalaryPaid 事件。
        """
        try:
            return self._pay_salary(staff_id)
        except IntegrityError:
            # 其他进程抢先写入了同一账期的工资
            logger.warning(f"工资记录唯一约束冲突: staff_id={staff_id}")
            return self._already_settled(staff_id)

    def _pay_salary(self, staff_id: int) -> SalaryPaymentResult:
        with self.ledger.serialized_scope() as (s, outbox):
            staff = s.get(Staff, staff_id)
            if staff is None:
                raise NotFoundError(f"员工 {staff_id} 不存在")
            if not staff.is_active:
                raise ValidationError(f"员工 {staff.name} 已离职")

            now = self.ledger.clock()
            period, year = period_key(now)
            amount = to_decimal(staff.salary)
            self.ledger.authorize(s, amount)
            existing = s.query(SalaryPayment).filter_by(staff_id=staff_id, period=period).first()
            already_paid = existing is not None

            if already_paid:
                logger.warning(f"工资已发放: 员工={staff.name}, 账期={period}")
            else:
                s.add(SalaryPayment(staff_id=staff_id, amount=float(amount), period=period,
                                    year=year, created_at=now))
                self.ledger.record_expense(
                    s, EXPENSE_SALARY,
                    f"Salary payment for {staff.name} ({staff.role}) - {period}", amount)
                s.flush()
                logger.info(f"发放工资: 员工={staff.name}, 金额={amount}, 账期={period}")

            result = SalaryPaymentResult(staff_id=staff.id, staff_name=staff.name, amount=amount,
                                         period=period, year=year, already_paid=already_paid)
            outbox.append(SalaryPaid(staff_id=staff.id, name=staff.name, amount=amount,
                                     period=period, year=year, already_paid=already_paid))
        return result

    def _already_settled(self, staff_id: int) -> SalaryPaymentResult:
        with self.ledger.serialized_scope() as (s, outbox):
            staff = s.get(Staff, staff_id)
            self.ledger.authorize(s, staff.salary)
            period, year = period_key(self.ledger.clock())
            existing = s.query(SalaryPayment).filter_by(staff_id=staff_id, period=period).one()
            amount = to_decimal(existing.amount)
            outbox.append(SalaryPaid(staff_id=staff.id, name=staff.name, amount=amount,
                                     period=period, year=year, already_paid=True))
        return SalaryPaymentResult(staff_id=staff.id, staff_name=staff.name, amount=amount,
                                   period=period, year=year, already_paid=True)

    def salary_status(self, period: str = None) -> List[dict]:
        """在职员工及其当期工资发放状态"""
        period = period or period_key(self.ledger.clock())[0]
        s = self.ledger.session_factory()
        try:
            staff = s.query(Staff).filter(Staff.is_active.is_(True)).order_by(Staff.id).all()
            paid_ids = {sid for (sid,) in s.query(SalaryPayment.staff_id).filter_by(period=period)}
            return [{"staff": st, "period": period, "paid": st.id in paid_ids} for st in staff]
        finally:
            s.close()

    def salary_history(self, staff_id: int) -> List[SalaryPayment]:
        s = self.ledger.session_factory()
        try:
            if s.get(Staff, staff_id) is None:
                raise NotFoundError(f"员工 {staff_id} 不存在")
            return s.query(SalaryPayment).filter_by(staff_id=staff_id).order_by(
                SalaryPayment.created_at.desc()).all()
        finally:
            s.close()

    def all_salary_payments(self) -> List[SalaryPayment]:
        s = self.ledger.session_factory()
        try:
            return s.query(SalaryPayment).order_by(SalaryPayment.created_at.desc(),
                                                   SalaryPayment.id.desc()).all()
        finally:
            s.close()
