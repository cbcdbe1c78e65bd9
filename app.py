"""健身房管理系统 - 主入口"""
import streamlit as st

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import config, get_logger
from models import SessionLocal, init_db
from services import build_services, EventType
from pages import (
    page_dashboard, page_reception, page_finance, page_payroll,
    page_inventory, page_staff, page_trainer
)

logger = get_logger(__name__)

# 页面配置
st.set_page_config(page_title=config.APP_NAME, layout="wide", page_icon="🏋️")

ROLES = ["Owner", "Receptionist", "Trainer"]


def _log_expiring(event):
    logger.info(f"到期提醒: 会员 {event.member_id} <{event.email}>")


@st.cache_resource
def get_services():
    """进程内共享同一套服务（同一把账本锁）"""
    init_db()
    svc = build_services(SessionLocal)
    svc.auth.seed_owner(config.DEFAULT_OWNER_USER, config.DEFAULT_OWNER_PASS)
    svc.bus.subscribe(EventType.MEMBERSHIP_EXPIRING, _log_expiring)
    return svc


def check_login(svc):
    """登录检查"""
    if st.session_state.get('logged_in'):
        return True

    c1, c2, c3 = st.columns([1, 2, 1])
    with c2:
        st.markdown(f"## 🔐 {config.APP_NAME}")
        role = st.selectbox("身份", ROLES)
        username = st.text_input("账号")
        password = st.text_input("密码", type="password")

        if st.button("登录系统", use_container_width=True):
            if role == "Owner":
                account = svc.auth.login_owner(username, password)
            else:
                account = svc.auth.login_staff(username, password, role)
            if account:
                st.session_state.logged_in = True
                st.session_state.username = account.username
                st.session_state.user_role = role
                st.session_state.user_id = account.id
                st.rerun()
            else:
                st.error("账号或密码错误")
    return False


def logout():
    """退出登录"""
    for key in ['logged_in', 'username', 'user_role', 'user_id', 'current_page']:
        st.session_state.pop(key, None)
    st.rerun()


# 页面映射
PAGES = {
    "🏠 运营驾驶舱": page_dashboard,
    "🛎️ 前台": page_reception,
    "🏋️ 器械与采购": page_inventory,
    "📋 财务报表": page_finance,
    "💵 工资发放": page_payroll,
    "⚙️ 员工与套餐": page_staff,
    "🏃 私教会员": page_trainer,
}

# 各角色可见的页面分组
PAGE_GROUPS = {
    "Owner": {
        "经营": ["🏠 运营驾驶舱", "📋 财务报表", "💵 工资发放"],
        "日常": ["🛎️ 前台", "🏋️ 器械与采购", "🏃 私教会员"],
        "管理": ["⚙️ 员工与套餐"],
    },
    "Receptionist": {"日常": ["🛎️ 前台", "🏋️ 器械与采购"]},
    "Trainer": {"日常": ["🏃 私教会员"]},
}


def main():
    svc = get_services()

    if not check_login(svc):
        return

    user = st.session_state.username
    role = st.session_state.user_role
    groups = PAGE_GROUPS[role]

    st.sidebar.markdown(f"👤 **{user}** ({role})")
    st.sidebar.divider()

    allowed = [p for pages in groups.values() for p in pages]
    for group, pages in groups.items():
        with st.sidebar.expander(group, expanded=True):
            for p in pages:
                if st.button(p, key=f"nav_{p}", use_container_width=True):
                    st.session_state.current_page = p

    page = st.session_state.get('current_page')
    if page not in allowed:
        page = allowed[0]

    st.sidebar.divider()
    if st.sidebar.button("🚪 退出登录", use_container_width=True):
        logout()

    PAGES[page](svc, user, role)


if __name__ == '__main__':
    main()
