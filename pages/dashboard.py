"""运营驾驶舱页面"""
import streamlit as st
import pandas as pd
from utils.helpers import format_money


def page_dashboard(svc, user, role):
    st.title("📊 运营驾驶舱")
    summary = svc.ledger.summary()

    k1, k2, k3, k4 = st.columns(4)
    k1.metric("👥 有效会员", svc.membership.active_member_count())
    k2.metric("💰 本月营收", format_money(svc.ledger.monthly_revenue()))
    k3.metric("📈 净利润", format_money(summary.net_profit))
    k4.metric("🏦 可用余额", format_money(summary.available_balance))
    st.divider()

    report = svc.retention.analyze()
    st.markdown("### 🏅 忠诚会员")
    st.caption(f"续费会员平均续费次数: {report.average_renewals:.2f}")
    if report.top_loyal:
        st.dataframe(pd.DataFrame([{
            "编号": r.member_id, "姓名": r.name, "续费次数": r.renewal_count
        } for r in report.top_loyal]), use_container_width=True, hide_index=True)
    else:
        st.info("暂无会员数据")

    unpaid = svc.membership.unpaid_members()
    st.markdown("### ⏰ 近30天未缴费会员")
    if unpaid:
        st.dataframe(pd.DataFrame([{
            "编号": m.id, "姓名": m.name, "到期日": m.expiry_date.strftime("%Y-%m-%d")
        } for m in unpaid]), use_container_width=True, hide_index=True)
    else:
        st.success("✅ 全部会员近期已缴费")
