"""测试公共夹具"""
import os
import sys
import datetime

os.environ.setdefault('GYM_BCRYPT_ROUNDS', '4')
os.environ.setdefault('GYM_LOG_PATH', os.path.join(os.path.dirname(os.path.abspath(__file__)), 'test.log'))
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from models import init_db, get_engine, get_session_factory
from services import build_services

START = datetime.datetime(2026, 3, 10, 9, 0, 0)


class FakeClock:
    """可控时钟"""

    def __init__(self, now: datetime.datetime):
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += datetime.timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def session_factory(tmp_path):
    """每个测试使用独立的数据库文件"""
    db_path = str(tmp_path / "gym_test.db")
    init_db(db_path)
    yield get_session_factory(db_path)
    get_engine(db_path).dispose()


@pytest.fixture
def svc(session_factory, clock):
    return build_services(session_factory, clock=clock, lock_timeout=5)


@pytest.fixture
def basic_plan(svc):
    return svc.membership.add_plan("Basic", 50.0)


@pytest.fixture
def trainer_plan(svc):
    return svc.membership.add_plan("Gold", 120.0, includes_trainer=True)


def add_revenue(svc, amount, remark="非会员收入"):
    """直接记一笔非会员收入"""
    with svc.ledger.serialized_scope() as (s, _):
        svc.ledger.record_payment(s, None, amount, remark=remark)


def count_rows(session_factory, entity) -> int:
    s = session_factory()
    try:
        return s.query(entity).count()
    finally:
        s.close()
