"""器械采购与设备订单服务模块"""
from typing import List
from models import Machine, EquipmentOrder
from models.entities import EXPENSE_MACHINE, EXPENSE_EQUIPMENT, MACHINE_STATUSES
from config import get_logger
from utils.exceptions import NotFoundError, AlreadyPaidError, ValidationError
from utils.helpers import to_decimal
from utils.transaction import transaction_scope

logger = get_logger(__name__)


def _check_status(status: str):
    if status not in MACHINE_STATUSES:
        raise ValidationError(f"无效的器械状态: {status}")


class PurchasingService:
    def __init__(self, ledger):
        self.ledger = ledger

    def add_machine(self, name: str, status: str) -> Machine:
        """登记不计入支出的器械（旧设备/赠送）"""
        if not name or not name.strip():
            raise ValidationError("器械名称必填")
        _check_status(status)
        with transaction_scope(self.ledger.session_factory) as (s, _):
            machine = Machine(name=name.strip(), status=status, created_at=self.ledger.clock())
            s.add(machine)
        logger.info(f"登记器械: {name}")
        return machine

    def purchase_machine(self, name: str, status: str, price) -> Machine:
        """从营收中采购器械：余额校验 + 器械 + 支出在同一事务内"""
        if not name or not name.strip():
            raise ValidationError("器械名称必填")
        _check_status(status)
        if to_decimal(price) <= 0:
            raise ValidationError("采购价格必须大于0")
        with self.ledger.serialized_scope() as (s, _):
            self.ledger.authorize(s, price)
            now = self.ledger.clock()
            machine = Machine(name=name.strip(), status=status, purchase_price=float(price),
                              purchase_date=now, created_at=now)
            s.add(machine)
            self.ledger.record_expense(s, EXPENSE_MACHINE, f"Purchase of {machine.name}", price)
        logger.info(f"采购器械: {name}, 价格={price}")
        return machine

    def update_machine_status(self, machine_id: int, status: str) -> Machine:
        _check_status(status)
        with transaction_scope(self.ledger.session_factory) as (s, _):
            machine = s.get(Machine, machine_id)
            if machine is None:
                raise NotFoundError(f"器械 {machine_id} 不存在")
            machine.status = status
        return machine

    def list_machines(self) -> List[Machine]:
        s = self.ledger.session_factory()
        try:
            return s.query(Machine).order_by(Machine.id).all()
        finally:
            s.close()

    def place_equipment_order(self, equipment_name: str, quantity: int, total_price) -> EquipmentOrder:
        """下单（未付款）"""
        if not equipment_name or not equipment_name.strip():
            raise ValidationError("设备名称必填")
        if int(quantity) <= 0:
            raise ValidationError("数量必须大于0")
        if to_decimal(total_price) <= 0:
            raise ValidationError("总价必须大于0")
        with transaction_scope(self.ledger.session_factory) as (s, _):
            order = EquipmentOrder(equipment_name=equipment_name.strip(), quantity=int(quantity),
                                   total_price=float(total_price), is_paid=False,
                                   created_at=self.ledger.clock())
            s.add(order)
        logger.info(f"设备下单: {equipment_name} x{quantity}, 总价={total_price}")
        return order

    def pay_equipment_order(self, order_id: int) -> EquipmentOrder:
        """订单付款，每张订单只能付款一次"""
        with self.ledger.serialized_scope() as (s, _):
            order = s.get(EquipmentOrder, order_id)
            if order is None:
                raise NotFoundError(f"订单 {order_id} 不存在")
            if order.is_paid:
                logger.warning(f"订单重复付款: {order_id}")
                raise AlreadyPaidError(f"订单 {order_id} 已付款")
            self.ledger.authorize(s, order.total_price)
            order.is_paid = True
            order.paid_at = self.ledger.clock()
            self.ledger.record_expense(
                s, EXPENSE_EQUIPMENT,
                f"Payment for {order.equipment_name} (Qty: {order.quantity})",
                order.total_price, related_order_id=order.id)
        logger.info(f"订单付款: {order_id}, 金额={order.total_price}")
        return order

    def unpaid_orders(self) -> List[EquipmentOrder]:
        s = self.ledger.session_factory()
        try:
            return s.query(EquipmentOrder).filter(EquipmentOrder.is_paid.is_(False)).order_by(
                EquipmentOrder.id).all()
        finally:
            s.close()

    def order_history(self) -> List[EquipmentOrder]:
        s = self.ledger.session_factory()
        try:
            return s.query(EquipmentOrder).order_by(EquipmentOrder.created_at.desc(),
                                                    EquipmentOrder.id.desc()).all()
        finally:
            s.close()
