"""事件通知总线

服务在事务提交后发布事件，订阅者（到期提醒、工资发放通知等）在调用方线程中
按订阅顺序同步接收。单个订阅者抛出的异常只记录日志，不影响其他订阅者，
也不会回滚已经提交的账本写入。
"""
import threading
from dataclasses import dataclass, asdict
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, List
from config import get_logger

logger = get_logger(__name__)


class EventType(Enum):
    MEMBERSHIP_EXPIRING = "membership.expiring"
    SALARY_PAID = "salary.paid"


@dataclass(frozen=True)
class MembershipExpiring:
    member_id: int
    name: str
    email: str

    event_type = EventType.MEMBERSHIP_EXPIRING

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SalaryPaid:
    staff_id: int
    name: str
    amount: Decimal
    period: str
    year: str
    already_paid: bool

    event_type = EventType.SALARY_PAID

    def to_dict(self) -> dict:
        return asdict(self)


Handler = Callable[[object], None]


class EventBus:
    """显式构造、按事件类型登记订阅者的发布/订阅总线"""

    def __init__(self):
        self._handlers: Dict[EventType, List[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """登记订阅者，返回取消订阅函数"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        return lambda: self.unsubscribe(event_type, handler)

    def unsubscribe(self, event_type: EventType, handler: Handler) -> bool:
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                return True
        return False

    def subscribers(self, event_type: EventType) -> List[Handler]:
        with self._lock:
            return list(self._handlers.get(event_type, []))

    def publish(self, event) -> int:
        """同步派发事件，返回成功处理的订阅者数量"""
        delivered = 0
        for handler in self.subscribers(event.event_type):
            try:
                handler(event)
                delivered += 1
            except Exception:
                logger.exception(f"事件订阅者处理失败: {event.event_type.value} -> {handler!r}")
        return delivered
