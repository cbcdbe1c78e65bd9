"""事务管理模块"""
from contextlib import contextmanager
from config import get_logger
from models.base import SQLITE_BEGIN_OPTION

logger = get_logger(__name__)


@contextmanager
def transaction_scope(session_factory, bus=None):
    """事务上下文管理器，确保原子性操作

    产出 (session, outbox)；事务以 BEGIN IMMEDIATE 开启，其他进程的写事务
    需等待本事务结束。outbox 中的事件仅在提交成功后派发。
    """
    s = session_factory()
    outbox = []
    try:
        s.connection(execution_options={SQLITE_BEGIN_OPTION: "IMMEDIATE"})
        yield s, outbox
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
    # 事务成功后派发事件
    if bus is not None:
        for event in outbox:
            bus.publish(event)
    elif outbox:
        logger.debug(f"未配置事件总线, 丢弃 {len(outbox)} 个事件")
