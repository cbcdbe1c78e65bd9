"""财务报表页面"""
import streamlit as st
import pandas as pd
from utils.helpers import format_money


def page_finance(svc, user, role):
    """收入、支出与余额"""
    st.title("📋 财务报表")
    if role != "Owner":
        st.error("⛔️ 权限不足")
        return

    summary = svc.ledger.summary()
    c1, c2, c3 = st.columns(3)
    c1.metric("总收入", format_money(summary.total_revenue))
    c2.metric("运营支出", format_money(summary.total_expenses))
    c3.metric("已发工资", format_money(summary.total_salaries_paid))
    c4, c5 = st.columns(2)
    c4.metric("净利润", format_money(summary.net_profit))
    c5.metric("可用余额", format_money(summary.available_balance))
    st.divider()

    t1, t2 = st.tabs(["💰 近期收入", "📉 支出明细"])
    with t1:
        payments = svc.ledger.recent_payments()
        if not payments:
            st.info("近期无收入记录")
        else:
            st.dataframe(pd.DataFrame([{
                "时间": p.created_at.strftime("%Y-%m-%d %H:%M"), "会员编号": p.member_id,
                "金额": p.amount, "备注": p.remark
            } for p in payments]), use_container_width=True, hide_index=True)

    with t2:
        breakdown = svc.ledger.expense_breakdown()
        if breakdown:
            st.markdown("#### 按类型汇总")
            df = pd.DataFrame([{"类型": b["type"], "金额": float(b["total"]), "笔数": b["count"]}
                               for b in breakdown])
            st.dataframe(df, use_container_width=True, hide_index=True)
            st.bar_chart(df.set_index("类型")["金额"])
        expenses = svc.ledger.expenses()
        if not expenses:
            st.info("暂无支出")
        else:
            st.dataframe(pd.DataFrame([{
                "时间": e.created_at.strftime("%Y-%m-%d %H:%M"), "类型": e.expense_type,
                "说明": e.description, "金额": e.amount
            } for e in expenses]), use_container_width=True, hide_index=True)
