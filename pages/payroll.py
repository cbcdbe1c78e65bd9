"""工资发放页面"""
import streamlit as st
import pandas as pd
from utils.exceptions import GymError
from utils.helpers import format_money


def page_payroll(svc, user, role):
    st.title("💵 工资发放")
    if role != "Owner":
        st.error("⛔️ 权限不足")
        return

    status = svc.payroll.salary_status()
    if not status:
        st.info("暂无在职员工")
    else:
        st.caption(f"当前账期: {status[0]['period']}")
        for row in status:
            staff = row["staff"]
            c1, c2, c3 = st.columns([3, 2, 2])
            c1.write(f"**{staff.name}** ({staff.role})")
            c2.write(format_money(staff.salary))
            if row["paid"]:
                c3.success("本月已发")
            elif c3.button("发放", key=f"pay_{staff.id}"):
                try:
                    result = svc.payroll.pay_salary(staff.id)
                    if result.already_paid:
                        st.warning(f"{result.staff_name} 本月工资已发放")
                    else:
                        st.success(f"已向 {result.staff_name} 发放 {format_money(result.amount)}")
                    st.rerun()
                except GymError as e:
                    st.error(str(e))

    st.divider()
    st.markdown("### 📜 发放记录")
    staff = svc.staff.list_all()
    names = {s.id: s.name for s in staff}
    t1, t2 = st.tabs(["全部员工", "单个员工"])
    with t1:
        payments = svc.payroll.all_salary_payments()
        if payments:
            st.dataframe(pd.DataFrame([{
                "员工": names.get(p.staff_id, p.staff_id), "账期": p.period, "金额": p.amount,
                "时间": p.created_at.strftime("%Y-%m-%d %H:%M")
            } for p in payments]), use_container_width=True, hide_index=True)
        else:
            st.info("暂无发放记录")

    with t2:
        if not staff:
            st.info("暂无员工")
            return
        # 含已离职员工，工资记录保留
        s_map = {f"{s.id} - {s.name}" + ("" if s.is_active else " (离职)"): s for s in staff}
        sel = s_map[st.selectbox("选择员工", list(s_map.keys()), key="history_staff")]
        try:
            history = svc.payroll.salary_history(sel.id)
        except GymError as e:
            st.error(str(e))
            return
        if history:
            st.metric("累计发放", format_money(sum(p.amount for p in history)), delta=f"共 {len(history)} 笔")
            st.dataframe(pd.DataFrame([{
                "账期": p.period, "年份": p.year, "金额": p.amount,
                "时间": p.created_at.strftime("%Y-%m-%d %H:%M")
            } for p in history]), use_container_width=True, hide_index=True)
        else:
            st.info(f"{sel.name} 暂无工资记录")
