#!/usr/bin/env python3
"""初始化数据脚本 - 套餐、店主账号与示例员工"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import config
from models import SessionLocal, init_db
from services import build_services
from utils.exceptions import ValidationError

PLANS = [
    ("Basic", 50.0, False, False),
    ("Gold", 120.0, True, False),
    ("Platinum", 200.0, True, True),
]

STAFF = [
    ("Rita", "Receptionist", 2000.0, "rita", "rita123"),
    ("Sam", "Trainer", 3000.0, "sam", "sam123"),
]


def init_plans(svc):
    """初始化会员套餐"""
    existing = {p.name for p in svc.membership.available_plans()}
    for name, price, trainer, supplements in PLANS:
        if name not in existing:
            svc.membership.add_plan(name, price, trainer, supplements)
    print("✅ 套餐初始化完成")


def init_staff(svc):
    """初始化示例员工"""
    for name, role, salary, username, password in STAFF:
        try:
            svc.staff.hire(name, role, salary, username, password)
        except ValidationError:
            print(f"跳过已存在员工: {username}")
    print("✅ 员工初始化完成")


def main():
    init_db()
    svc = build_services(SessionLocal)
    svc.auth.seed_owner(config.DEFAULT_OWNER_USER, config.DEFAULT_OWNER_PASS)
    print(f"✅ 店主账号: {config.DEFAULT_OWNER_USER}")
    init_plans(svc)
    init_staff(svc)


if __name__ == "__main__":
    main()
