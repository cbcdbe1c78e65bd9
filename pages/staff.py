"""员工与套餐管理页面"""
import streamlit as st
import pandas as pd
from models.entities import STAFF_ROLES
from utils.exceptions import GymError
from utils.helpers import format_money


def page_staff(svc, user, role):
    st.title("⚙️ 员工与套餐")
    if role != "Owner":
        st.error("⛔️ 权限不足")
        return

    t1, t2 = st.tabs(["👤 员工", "🎫 套餐"])
    with t1:
        staff = svc.staff.list_all()
        if staff:
            st.dataframe(pd.DataFrame([{
                "编号": s.id, "姓名": s.name, "岗位": s.role, "账号": s.username,
                "工资": format_money(s.salary), "在职": "是" if s.is_active else "否",
            } for s in staff]), use_container_width=True, hide_index=True)

        with st.expander("➕ 新增员工"):
            with st.form("hire_form"):
                name = st.text_input("姓名")
                staff_role = st.selectbox("岗位", STAFF_ROLES)
                salary = st.number_input("月薪", min_value=0.0, step=100.0)
                username = st.text_input("登录账号")
                password = st.text_input("登录密码", type="password")
                if st.form_submit_button("保存"):
                    try:
                        svc.staff.hire(name, staff_role, salary, username, password)
                        st.success("已新增")
                    except GymError as e:
                        st.error(str(e))

        active = [s for s in staff if s.is_active]
        if active:
            s_map = {f"{s.id} - {s.name}": s for s in active}
            sel = s_map[st.selectbox("选择员工", list(s_map.keys()))]
            c1, c2 = st.columns(2)
            new_salary = c1.number_input("调整月薪", min_value=0.0, value=float(sel.salary), step=100.0)
            if c1.button("保存月薪"):
                try:
                    svc.staff.update_salary(sel.id, new_salary)
                    st.rerun()
                except GymError as e:
                    st.error(str(e))
            if c2.button("⚠️ 办理离职"):
                try:
                    svc.staff.terminate(sel.id)
                    st.rerun()
                except GymError as e:
                    st.error(str(e))

    with t2:
        plans = svc.membership.available_plans()
        if plans:
            st.dataframe(pd.DataFrame([{
                "编号": p.id, "名称": p.name, "价格": format_money(p.price),
                "含私教": "是" if p.includes_trainer else "否",
                "含补剂": "是" if p.includes_supplements else "否",
            } for p in plans]), use_container_width=True, hide_index=True)
        with st.form("plan_form"):
            name = st.text_input("套餐名称")
            price = st.number_input("价格", min_value=0.0, step=10.0)
            trainer = st.checkbox("包含私教")
            supplements = st.checkbox("包含补剂")
            if st.form_submit_button("新增套餐"):
                try:
                    svc.membership.add_plan(name, price, trainer, supplements)
                    st.success("已新增")
                except GymError as e:
                    st.error(str(e))
