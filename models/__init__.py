"""数据模型模块"""
from .base import Base, engine, SessionLocal, get_engine, get_session_factory, init_db
from .entities import (
    Owner, Plan, Member, Payment, Staff, SalaryPayment, Expense,
    Machine, EquipmentOrder, ExpiryNotice
)

__all__ = [
    'Base', 'engine', 'SessionLocal', 'get_engine', 'get_session_factory', 'init_db',
    'Owner', 'Plan', 'Member', 'Payment', 'Staff', 'SalaryPayment', 'Expense',
    'Machine', 'EquipmentOrder', 'ExpiryNotice'
]
