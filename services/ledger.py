"""账本服务模块 - 收支汇总、余额校验与串行化写入"""
import datetime
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.sql import func
from models import Payment, Expense, SalaryPayment
from models.entities import EXPENSE_SALARY
from config import config, get_logger
from utils.exceptions import InsufficientFundsError, LedgerBusyError, ValidationError
from utils.helpers import to_decimal
from utils.transaction import transaction_scope

logger = get_logger(__name__)


@dataclass(frozen=True)
class FinancialSummary:
    total_revenue: Decimal
    total_expenses: Decimal
    total_salaries_paid: Decimal
    net_profit: Decimal
    available_balance: Decimal


class LedgerService:
    """
    所有支出（工资、器械采购、设备订单付款）与收入写入都必须在
    serialized_scope() 内完成：同一把账本锁 + 同一个数据库事务，
    保证余额校验与写入看到的是同一份余额。
    """

    def __init__(self, session_factory, bus=None, clock=datetime.datetime.now,
                 lock_timeout: float = None):
        self.session_factory = session_factory
        self.bus = bus
        self.clock = clock
        self.lock_timeout = config.LEDGER_LOCK_TIMEOUT if lock_timeout is None else lock_timeout
        self._lock = threading.RLock()

    @contextmanager
    def serialized_scope(self):
        """账本串行化事务，产出 (session, outbox)"""
        if not self._lock.acquire(timeout=self.lock_timeout):
            logger.warning(f"账本锁等待超时 ({self.lock_timeout}s)")
            raise LedgerBusyError("账本正忙，请稍后重试")
        try:
            with transaction_scope(self.session_factory, self.bus) as (s, outbox):
                yield s, outbox
        finally:
            self._lock.release()

    @contextmanager
    def _reader(self, s=None):
        if s is not None:
            yield s
            return
        s = self.session_factory()
        try:
            yield s
        finally:
            s.close()

    def summary(self, s=None) -> FinancialSummary:
        """收支汇总，单条语句读取保证快照一致"""
        revenue = select(func.coalesce(func.sum(Payment.amount), 0)).scalar_subquery()
        expenses = select(func.coalesce(func.sum(Expense.amount), 0)).where(
            Expense.expense_type != EXPENSE_SALARY).scalar_subquery()
        salaries = select(func.coalesce(func.sum(SalaryPayment.amount), 0)).scalar_subquery()
        with self._reader(s) as s:
            row = s.execute(select(revenue, expenses, salaries)).one()
        total_revenue, total_expenses, total_salaries = (to_decimal(v) for v in row)
        balance = total_revenue - total_expenses - total_salaries
        return FinancialSummary(
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            total_salaries_paid=total_salaries,
            net_profit=balance,
            available_balance=balance,
        )

    def authorize(self, s, amount) -> FinancialSummary:
        """支出前余额校验，不足时抛出 InsufficientFundsError"""
        required = to_decimal(amount)
        if required < 0:
            raise ValidationError("金额不能为负数")
        summary = self.summary(s)
        if summary.available_balance < required:
            logger.warning(f"余额不足: 可用={summary.available_balance}, 需要={required}")
            raise InsufficientFundsError(summary.available_balance, required)
        return summary

    def record_expense(self, s, expense_type: str, description: str, amount,
                       related_order_id: int = None) -> Expense:
        if to_decimal(amount) <= 0:
            raise ValidationError("金额必须大于0")
        expense = Expense(expense_type=expense_type, description=description,
                          amount=float(amount), related_order_id=related_order_id,
                          created_at=self.clock())
        s.add(expense)
        logger.info(f"记录支出: 类型={expense_type}, 金额={amount}, 说明={description}")
        return expense

    def record_payment(self, s, member_id: Optional[int], amount, remark: str = None) -> Payment:
        if to_decimal(amount) <= 0:
            raise ValidationError("金额必须大于0")
        payment = Payment(member_id=member_id, amount=float(amount), remark=remark,
                          created_at=self.clock())
        s.add(payment)
        logger.info(f"记录收款: 会员={member_id}, 金额={amount}")
        return payment

    def recent_payments(self, days: int = None) -> List[Payment]:
        since = self.clock() - datetime.timedelta(days=days or config.RECENT_PAYMENT_DAYS)
        with self._reader() as s:
            return s.query(Payment).filter(Payment.created_at >= since).order_by(
                Payment.created_at.desc(), Payment.id.desc()).all()

    def monthly_revenue(self) -> Decimal:
        """近一个月收入"""
        since = self.clock() - datetime.timedelta(days=config.RECENT_PAYMENT_DAYS)
        with self._reader() as s:
            return to_decimal(s.query(func.sum(Payment.amount)).filter(
                Payment.created_at >= since).scalar())

    def expenses(self) -> List[Expense]:
        with self._reader() as s:
            return s.query(Expense).order_by(Expense.created_at.desc(), Expense.id.desc()).all()

    def expense_breakdown(self) -> List[dict]:
        """按支出类型汇总"""
        with self._reader() as s:
            rows = s.query(Expense.expense_type, func.sum(Expense.amount), func.count(Expense.id)
                           ).group_by(Expense.expense_type).order_by(Expense.expense_type).all()
        return [{"type": t, "total": to_decimal(total), "count": n} for t, total, n in rows]
