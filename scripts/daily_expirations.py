#!/usr/bin/env python3
"""会籍到期提醒脚本 - 可通过cron每日执行

    0 8 * * * cd /opt/gym && python scripts/daily_expirations.py
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_logger
from models import SessionLocal, init_db
from services import build_services, EventType
from utils.helpers import mask_email

logger = get_logger("daily_expirations")


def send_expiry_notice(event):
    """邮件通知（当前仅写日志）"""
    logger.info(f"[邮件] 致 {mask_email(event.email)}: {event.name}，您的会籍将于明天到期，请及时续费")


def run():
    init_db()
    svc = build_services(SessionLocal)
    svc.bus.subscribe(EventType.MEMBERSHIP_EXPIRING, send_expiry_notice)
    events = svc.membership.process_daily_expirations()
    print(f"到期提醒已发送: {len(events)} 条")
    return events


if __name__ == "__main__":
    run()
