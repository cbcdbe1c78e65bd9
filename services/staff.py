"""员工管理服务模块"""
from typing import List
from sqlalchemy.exc import IntegrityError
from models import Staff
from models.entities import STAFF_ROLES
from config import get_logger
from utils.exceptions import NotFoundError, ValidationError
from utils.helpers import to_decimal
from utils.transaction import transaction_scope
from .auth import AuthService

logger = get_logger(__name__)


class StaffService:
    def __init__(self, session_factory, clock):
        self.session_factory = session_factory
        self.clock = clock

    def hire(self, name: str, role: str, salary, username: str, password: str) -> Staff:
        if not name or not name.strip():
            raise ValidationError("员工姓名必填")
        if role not in STAFF_ROLES:
            raise ValidationError(f"无效的岗位: {role}")
        if to_decimal(salary) <= 0:
            raise ValidationError("工资必须大于0")
        if not username or not password:
            raise ValidationError("账号密码必填")
        password_hash = AuthService.hash_password(password)
        try:
            with transaction_scope(self.session_factory) as (s, _):
                staff = Staff(name=name.strip(), role=role, salary=float(salary),
                              username=username.strip(),
                              password_hash=password_hash,
                              is_active=True, created_at=self.clock())
                s.add(staff)
        except IntegrityError:
            raise ValidationError(f"账号 {username} 已存在")
        logger.info(f"新增员工: {name} ({role}), 工资={salary}")
        return staff

    def update_salary(self, staff_id: int, salary) -> Staff:
        if to_decimal(salary) <= 0:
            raise ValidationError("工资必须大于0")
        with transaction_scope(self.session_factory) as (s, _):
            staff = s.get(Staff, staff_id)
            if staff is None:
                raise NotFoundError(f"员工 {staff_id} 不存在")
            old = staff.salary
            staff.salary = float(salary)
        logger.info(f"调整工资: 员工={staff.name}, {old} -> {salary}")
        return staff

    def terminate(self, staff_id: int) -> Staff:
        """员工离职（软删除，保留工资记录）"""
        with transaction_scope(self.session_factory) as (s, _):
            staff = s.get(Staff, staff_id)
            if staff is None:
                raise NotFoundError(f"员工 {staff_id} 不存在")
            staff.is_active = False
            staff.terminated_at = self.clock()
        logger.info(f"员工离职: {staff.name}")
        return staff

    def get(self, staff_id: int) -> Staff:
        s = self.session_factory()
        try:
            staff = s.get(Staff, staff_id)
            if staff is None:
                raise NotFoundError(f"员工 {staff_id} 不存在")
            return staff
        finally:
            s.close()

    def list_all(self) -> List[Staff]:
        s = self.session_factory()
        try:
            return s.query(Staff).order_by(Staff.id).all()
        finally:
            s.close()

    def list_active(self) -> List[Staff]:
        s = self.session_factory()
        try:
            return s.query(Staff).filter(Staff.is_active.is_(True)).order_by(Staff.id).all()
        finally:
            s.close()
