"""数据库基础配置"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool
from config import config

Base = declarative_base()

# 会话执行选项：指定 SQLite 事务的 BEGIN 模式
SQLITE_BEGIN_OPTION = "sqlite_begin"

# 数据库引擎缓存
_engines = {}
_session_factories = {}

def _setup_engine(db_path: str):
    """创建并配置数据库引擎"""
    eng = create_engine(
        f'sqlite:///{db_path}',
        connect_args={'check_same_thread': False, 'timeout': config.DB_BUSY_TIMEOUT},
        poolclass=QueuePool,
        pool_size=config.POOL_SIZE,
        max_overflow=config.MAX_OVERFLOW,
        pool_timeout=config.POOL_TIMEOUT
    )
    @event.listens_for(eng, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        # 关闭 pysqlite 自带的事务处理，由 begin 事件显式发出 BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(eng, "begin")
    def do_begin(conn):
        # 写事务使用 BEGIN IMMEDIATE，在读取余额前即取得数据库写锁
        mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")
    return eng

def get_engine(db_path: str = None):
    """获取数据库引擎"""
    db_path = db_path or config.DB_PATH
    if db_path not in _engines:
        _engines[db_path] = _setup_engine(db_path)
    return _engines[db_path]

def get_session_factory(db_path: str = None):
    """获取数据库会话工厂"""
    db_path = db_path or config.DB_PATH
    if db_path not in _session_factories:
        eng = get_engine(db_path)
        _session_factories[db_path] = sessionmaker(autocommit=False, autoflush=False,
                                                   expire_on_commit=False, bind=eng)
    return _session_factories[db_path]

def init_db(db_path: str = None):
    """初始化数据库表结构"""
    eng = get_engine(db_path)
    Base.metadata.create_all(eng)
    return eng

# 默认引擎和会话
engine = get_engine()
SessionLocal = get_session_factory()
