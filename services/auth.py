"""认证服务模块"""
from typing import Optional
import bcrypt
from config import config, get_logger
from models import Owner, Staff

logger = get_logger(__name__)


class AuthService:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    @staticmethod
    def hash_password(password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)).decode()

    @staticmethod
    def check_password(plain: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(plain.encode(), hashed.encode())
        except ValueError as e:
            logger.error(f"密码校验失败: {e}")
            return False

    def seed_owner(self, username: str, password: str, name: str = None) -> Owner:
        """创建默认店主账号（已存在则跳过）"""
        s = self.session_factory()
        try:
            owner = s.query(Owner).filter_by(username=username).first()
            if not owner:
                owner = Owner(username=username, password_hash=self.hash_password(password),
                              name=name or username)
                s.add(owner)
                s.commit()
                logger.info(f"创建店主账号: {username}")
            return owner
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    def login_owner(self, username: str, password: str) -> Optional[Owner]:
        s = self.session_factory()
        try:
            owner = s.query(Owner).filter_by(username=username).first()
            if owner and self.check_password(password, owner.password_hash):
                logger.info(f"店主登录: {username}")
                return owner
            logger.warning(f"店主登录失败: {username}")
            return None
        finally:
            s.close()

    def login_staff(self, username: str, password: str, role: str) -> Optional[Staff]:
        """员工登录，仅限在职且角色匹配"""
        s = self.session_factory()
        try:
            staff = s.query(Staff).filter_by(username=username, role=role).first()
            if staff and staff.is_active and self.check_password(password, staff.password_hash):
                logger.info(f"员工登录: {username} ({role})")
                return staff
            logger.warning(f"员工登录失败: {username} ({role})")
            return None
        finally:
            s.close()

