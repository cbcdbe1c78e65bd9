"""器械与设备采购页面"""
import streamlit as st
import pandas as pd
from models.entities import MACHINE_STATUSES
from utils.exceptions import GymError
from utils.helpers import format_money


def page_inventory(svc, user, role):
    st.title("🏋️ 器械与采购")
    t1, t2 = st.tabs(["🏋️ 器械", "📦 设备订单"])

    with t1:
        machines = svc.purchasing.list_machines()
        if machines:
            st.dataframe(pd.DataFrame([{
                "编号": m.id, "名称": m.name, "状态": m.status,
                "采购价": format_money(m.purchase_price) if m.purchase_price else "-",
            } for m in machines]), use_container_width=True, hide_index=True)
            m_map = {f"{m.id} - {m.name}": m for m in machines}
            c1, c2, c3 = st.columns([3, 2, 1])
            sel = m_map[c1.selectbox("器械", list(m_map.keys()))]
            new_status = c2.selectbox("状态", MACHINE_STATUSES, index=MACHINE_STATUSES.index(sel.status))
            if c3.button("更新"):
                try:
                    svc.purchasing.update_machine_status(sel.id, new_status)
                    st.rerun()
                except GymError as e:
                    st.error(str(e))
        else:
            st.info("暂无器械")

        if role == "Owner":
            with st.expander("➕ 采购器械"):
                name = st.text_input("器械名称")
                status = st.selectbox("初始状态", MACHINE_STATUSES, key="buy_status")
                price = st.number_input("采购价格", min_value=0.0, step=100.0)
                if st.button("确认采购", use_container_width=True):
                    try:
                        svc.purchasing.purchase_machine(name, status, price)
                        st.success("采购成功")
                        st.rerun()
                    except GymError as e:
                        st.error(str(e))

    with t2:
        if role != "Owner":
            st.error("⛔️ 权限不足")
            return
        with st.form("order_form"):
            equipment = st.text_input("设备名称")
            quantity = st.number_input("数量", min_value=1, step=1)
            total = st.number_input("总价", min_value=0.0, step=10.0)
            if st.form_submit_button("下单"):
                try:
                    svc.purchasing.place_equipment_order(equipment, int(quantity), total)
                    st.success("已下单")
                except GymError as e:
                    st.error(str(e))

        st.markdown("#### 待付款订单")
        for o in svc.purchasing.unpaid_orders():
            c1, c2 = st.columns([4, 1])
            c1.write(f"#{o.id} {o.equipment_name} × {o.quantity} = {format_money(o.total_price)}")
            if c2.button("付款", key=f"pay_order_{o.id}"):
                try:
                    svc.purchasing.pay_equipment_order(o.id)
                    st.rerun()
                except GymError as e:
                    st.error(str(e))

        history = svc.purchasing.order_history()
        if history:
            st.markdown("#### 全部订单")
            st.dataframe(pd.DataFrame([{
                "编号": o.id, "设备": o.equipment_name, "数量": o.quantity, "总价": o.total_price,
                "已付款": "是" if o.is_paid else "否",
                "下单时间": o.created_at.strftime("%Y-%m-%d"),
            } for o in history]), use_container_width=True, hide_index=True)
