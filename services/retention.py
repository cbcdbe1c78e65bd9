"""会员留存分析模块"""
from dataclasses import dataclass, field
from typing import List
from sqlalchemy.sql import func
from models import Member, Payment
from config import config


@dataclass(frozen=True)
class MemberRetention:
    member_id: int
    name: str
    renewal_count: int


@dataclass(frozen=True)
class RetentionReport:
    average_renewals: float
    top_loyal: List[MemberRetention] = field(default_factory=list)
    members: List[MemberRetention] = field(default_factory=list)


class RetentionService:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    def analyze(self, limit: int = None) -> RetentionReport:
        """
        续费次数 = max(缴费笔数 - 1, 0)，首笔缴费是注册而非续费。
        平均续费次数只统计续费过的会员；排行按续费次数降序，
        次数相同按会员编号升序。
        """
        limit = config.TOP_LOYAL_LIMIT if limit is None else limit
        s = self.session_factory()
        try:
            counts = (
                s.query(Payment.member_id.label('member_id'), func.count(Payment.id).label('n'))
                 .filter(Payment.member_id.isnot(None))
                 .group_by(Payment.member_id).subquery()
            )
            members = (
                s.query(Member.id, Member.name, func.coalesce(counts.c.n, 0))
                 .outerjoin(counts, counts.c.member_id == Member.id)
                 .filter(Member.is_deleted.is_(False))
                 .order_by(Member.id).all()
            )
        finally:
            s.close()

        rows = [MemberRetention(member_id=mid, name=name, renewal_count=max(int(n) - 1, 0))
                for mid, name, n in members]
        renewed = [r.renewal_count for r in rows if r.renewal_count > 0]
        average = sum(renewed) / len(renewed) if renewed else 0.0
        # sorted 为稳定排序，rows 已按会员编号升序
        top = sorted(rows, key=lambda r: r.renewal_count, reverse=True)[:limit]
        return RetentionReport(average_renewals=average, top_loyal=top, members=rows)
