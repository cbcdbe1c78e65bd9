"""配置管理模块"""
import os
import logging
from dataclasses import dataclass

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(os.getenv('GYM_LOG_PATH', 'gym.log'), encoding='utf-8'),
        logging.StreamHandler()
    ]
)

def get_logger(name: str) -> logging.Logger:
    """获取模块日志器"""
    return logging.getLogger(name)

@dataclass
class Config:
    # 应用配置
    APP_NAME: str = os.getenv('GYM_APP_NAME', '健身房管理系统')
    DEFAULT_OWNER_USER: str = os.getenv('GYM_OWNER_USER', 'owner')
    DEFAULT_OWNER_PASS: str = os.getenv('GYM_OWNER_PASS', 'owner123')

    # 数据库配置
    DB_PATH: str = os.getenv('GYM_DB_PATH', 'gym.db')
    DB_BUSY_TIMEOUT: int = int(os.getenv('GYM_DB_BUSY_TIMEOUT', '15'))

    # 会员配置
    MEMBERSHIP_DAYS: int = int(os.getenv('GYM_MEMBERSHIP_DAYS', '30'))
    TOP_LOYAL_LIMIT: int = int(os.getenv('GYM_TOP_LOYAL_LIMIT', '5'))
    RECENT_PAYMENT_DAYS: int = int(os.getenv('GYM_RECENT_PAYMENT_DAYS', '30'))
    PASSWORD_LENGTH: int = int(os.getenv('GYM_PASSWORD_LENGTH', '8'))

    # 安全配置
    BCRYPT_ROUNDS: int = int(os.getenv('GYM_BCRYPT_ROUNDS', '12'))

    # 账本锁等待上限（秒）
    LEDGER_LOCK_TIMEOUT: float = float(os.getenv('GYM_LEDGER_LOCK_TIMEOUT', '10'))

    # 连接池配置
    POOL_SIZE: int = int(os.getenv('GYM_POOL_SIZE', '5'))
    MAX_OVERFLOW: int = int(os.getenv('GYM_MAX_OVERFLOW', '10'))
    POOL_TIMEOUT: int = int(os.getenv('GYM_POOL_TIMEOUT', '30'))

config = Config()
