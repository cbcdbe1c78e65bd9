"""前台页面：注册、签到、续费、会员档案"""
import streamlit as st
import pandas as pd
from utils.exceptions import GymError
from utils.helpers import format_money


def _plan_selector(svc, label, key):
    plans = svc.membership.available_plans()
    if not plans:
        st.warning("暂无套餐，请先由店主添加套餐")
        return None
    p_map = {f"{p.name} ({format_money(p.price)})": p for p in plans}
    return p_map[st.selectbox(label, list(p_map.keys()), key=key)]


def page_reception(svc, user, role):
    st.title("🛎️ 前台")
    t1, t2, t3, t4 = st.tabs(["✅ 签到", "📝 新会员注册", "🔁 续费", "👥 会员档案"])

    with t1:
        member_id = st.number_input("会员编号", min_value=1, step=1, key="checkin_id")
        if st.button("签到", use_container_width=True):
            try:
                result = svc.membership.check_in(int(member_id))
                if result.admitted:
                    st.success(f"欢迎 {result.name}！会籍有效至 {result.expiry_date:%Y-%m-%d}")
                else:
                    st.error(f"{result.name} 会籍已于 {result.expiry_date:%Y-%m-%d} 到期，请续费")
            except GymError as e:
                st.error(str(e))

    with t2:
        with st.form("register_form"):
            name = st.text_input("姓名")
            email = st.text_input("邮箱")
            plan = _plan_selector(svc, "套餐", "register_plan")
            submitted = st.form_submit_button("注册并收款")
        if submitted and plan:
            try:
                creds = svc.membership.register(name, email, plan.id)
                st.success(f"注册成功！会员编号: {creds.member_id}")
                st.info(f"初始密码（仅显示一次）: `{creds.generated_password}`")
            except GymError as e:
                st.error(str(e))

    with t3:
        member_id = st.number_input("会员编号", min_value=1, step=1, key="renew_id")
        plan = _plan_selector(svc, "续费套餐", "renew_plan")
        if st.button("确认续费", use_container_width=True) and plan:
            try:
                expiry = svc.membership.renew(int(member_id), plan.id)
                st.success(f"续费成功，新到期日 {expiry:%Y-%m-%d}")
            except GymError as e:
                st.error(str(e))

    with t4:
        members = svc.membership.list_members()
        if not members:
            st.info("暂无会员")
            return
        st.dataframe(pd.DataFrame([{
            "编号": m.id, "姓名": m.name, "邮箱": m.email,
            "套餐": m.plan.name if m.plan else "-", "到期日": m.expiry_date.strftime("%Y-%m-%d"),
            "状态": m.status,
        } for m in members]), use_container_width=True, hide_index=True)

        m_map = {f"{m.id} - {m.name}": m for m in members}
        sel = m_map[st.selectbox("查看会员", list(m_map.keys()))]
        history = svc.membership.payment_history(sel.id)
        st.markdown("#### 缴费记录")
        st.dataframe(pd.DataFrame([{
            "时间": p.created_at.strftime("%Y-%m-%d %H:%M"), "金额": p.amount, "备注": p.remark
        } for p in history]), use_container_width=True, hide_index=True)

        if st.button("⚠️ 终止会籍", key=f"terminate_{sel.id}"):
            try:
                svc.membership.terminate(sel.id)
                st.success("已终止")
                st.rerun()
            except GymError as e:
                st.error(str(e))
