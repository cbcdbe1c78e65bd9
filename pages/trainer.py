"""教练页面"""
import streamlit as st
import pandas as pd


def page_trainer(svc, user, role):
    st.title("🏃 私教会员")
    roster = svc.membership.trainer_roster()
    if not roster:
        st.info("暂无私教会员")
        return
    st.dataframe(pd.DataFrame([{
        "编号": m.id, "姓名": m.name, "套餐": m.plan.name,
        "补剂": "是" if m.plan.includes_supplements else "否",
        "到期日": m.expiry_date.strftime("%Y-%m-%d"),
    } for m in roster]), use_container_width=True, hide_index=True)
