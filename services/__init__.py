"""业务服务模块"""
import datetime
from dataclasses import dataclass
from .auth import AuthService
from .events import EventBus, EventType, MembershipExpiring, SalaryPaid
from .ledger import LedgerService, FinancialSummary
from .membership import MembershipService, CheckInOutcome, derive_status
from .payroll import PayrollService
from .purchasing import PurchasingService
from .retention import RetentionService
from .staff import StaffService


@dataclass
class GymServices:
    bus: EventBus
    auth: AuthService
    ledger: LedgerService
    membership: MembershipService
    payroll: PayrollService
    purchasing: PurchasingService
    retention: RetentionService
    staff: StaffService


def build_services(session_factory, bus: EventBus = None, clock=datetime.datetime.now,
                   lock_timeout: float = None) -> GymServices:
    """围绕同一个会话工厂、事件总线和时钟构建全部服务"""
    bus = bus or EventBus()
    ledger = LedgerService(session_factory, bus=bus, clock=clock, lock_timeout=lock_timeout)
    return GymServices(
        bus=bus,
        auth=AuthService(session_factory),
        ledger=ledger,
        membership=MembershipService(ledger),
        payroll=PayrollService(ledger),
        purchasing=PurchasingService(ledger),
        retention=RetentionService(session_factory),
        staff=StaffService(session_factory, clock),
    )


__all__ = [
    'AuthService', 'EventBus', 'EventType', 'MembershipExpiring', 'SalaryPaid',
    'LedgerService', 'FinancialSummary', 'MembershipService', 'CheckInOutcome', 'derive_status',
    'PayrollService', 'PurchasingService', 'RetentionService', 'StaffService',
    'GymServices', 'build_services'
]
