"""通用工具函数"""
import datetime
import secrets
import string
from decimal import Decimal

PASSWORD_ALPHABET = string.ascii_uppercase + string.digits


def to_decimal(val) -> Decimal:
    if val is None:
        return Decimal('0.00')
    return Decimal(str(val))


def format_money(val) -> str:
    return f"${to_decimal(val):,.2f}"


def period_key(moment: datetime.datetime) -> tuple:
    """工资账期 (YYYY-MM, YYYY)"""
    return moment.strftime("%Y-%m"), moment.strftime("%Y")


def day_bounds(day: datetime.date) -> tuple:
    """某日的起止时间 [start, end)"""
    start = datetime.datetime.combine(day, datetime.time.min)
    return start, start + datetime.timedelta(days=1)


def generate_password(length: int = 8) -> str:
    return ''.join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def mask_email(val) -> str:
    """脱敏函数：保留邮箱首字母和域名"""
    s = str(val or '')
    if '@' not in s:
        return s
    local, domain = s.split('@', 1)
    return (local[:1] + "***@" + domain) if local else s
