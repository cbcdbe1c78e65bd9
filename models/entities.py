"""数据库实体模型"""
import datetime
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Date, ForeignKey, Boolean, UniqueConstraint
)
from sqlalchemy.orm import relationship
from .base import Base

# 会员状态
STATUS_ACTIVE = 'Active'
STATUS_EXPIRED = 'Expired'

# 员工角色
ROLE_RECEPTIONIST = 'Receptionist'
ROLE_TRAINER = 'Trainer'
STAFF_ROLES = (ROLE_RECEPTIONIST, ROLE_TRAINER)

# 支出类型
EXPENSE_SALARY = 'Salary'
EXPENSE_MACHINE = 'Machine'
EXPENSE_EQUIPMENT = 'Equipment'

# 器械状态
MACHINE_WORKING = 'Working'
MACHINE_MAINTENANCE = 'Maintenance'
MACHINE_OUT_OF_ORDER = 'Out of Order'
MACHINE_STATUSES = (MACHINE_WORKING, MACHINE_MAINTENANCE, MACHINE_OUT_OF_ORDER)


class Owner(Base):
    __tablename__ = 'owners'
    id = Column(Integer, primary_key=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)
    name = Column(String(100))
    created_at = Column(DateTime, default=datetime.datetime.now)


class Plan(Base):
    __tablename__ = 'plans'
    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)
    price = Column(Float, nullable=False)
    includes_trainer = Column(Boolean, default=False)
    includes_supplements = Column(Boolean, default=False)


class Member(Base):
    __tablename__ = 'members'
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False)
    password_hash = Column(String(200), nullable=False)
    plan_id = Column(Integer, ForeignKey('plans.id'), nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    # 仅作展示缓存，准入判断时按到期日重新计算
    status = Column(String(20), default=STATUS_ACTIVE)
    is_deleted = Column(Boolean, default=False)
    terminated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.now)

    plan = relationship("Plan")
    payments = relationship("Payment", back_populates="member")


class Payment(Base):
    __tablename__ = 'payments'
    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey('members.id'), nullable=True)
    amount = Column(Float, nullable=False)
    remark = Column(String(200))
    created_at = Column(DateTime, default=datetime.datetime.now)

    member = relationship("Member", back_populates="payments")


class Staff(Base):
    __tablename__ = 'staff'
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False)
    salary = Column(Float, nullable=False)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.datetime.now)
    terminated_at = Column(DateTime, nullable=True)

    salary_payments = relationship("SalaryPayment", back_populates="staff")


class SalaryPayment(Base):
    __tablename__ = 'salary_payments'
    __table_args__ = (UniqueConstraint('staff_id', 'period', name='uq_salary_staff_period'),)
    id = Column(Integer, primary_key=True)
    staff_id = Column(Integer, ForeignKey('staff.id'), nullable=False)
    amount = Column(Float, nullable=False)
    period = Column(String(7), nullable=False)  # YYYY-MM
    year = Column(String(4), nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.now)

    staff = relationship("Staff", back_populates="salary_payments")


class Expense(Base):
    __tablename__ = 'expenses'
    id = Column(Integer, primary_key=True)
    expense_type = Column(String(20), nullable=False)
    description = Column(String(200))
    amount = Column(Float, nullable=False)
    related_order_id = Column(Integer, ForeignKey('equipment_orders.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.now)


class Machine(Base):
    __tablename__ = 'machines'
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    status = Column(String(20), default=MACHINE_WORKING)
    # 无采购价表示不计入支出（旧设备/赠送）
    purchase_price = Column(Float, nullable=True)
    purchase_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.now)


class EquipmentOrder(Base):
    __tablename__ = 'equipment_orders'
    id = Column(Integer, primary_key=True)
    equipment_name = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    total_price = Column(Float, nullable=False)
    is_paid = Column(Boolean, default=False)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.now)


class ExpiryNotice(Base):
    __tablename__ = 'expiry_notices'
    __table_args__ = (UniqueConstraint('member_id', 'notice_date', name='uq_notice_member_day'),)
    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey('members.id'), nullable=False)
    notice_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.now)
