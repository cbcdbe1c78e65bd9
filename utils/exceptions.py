"""自定义异常类"""


class GymError(Exception):
    """健身房系统基础异常"""
    pass


class NotFoundError(GymError):
    """引用的会员/员工/订单不存在"""
    pass


class InvalidPlanError(GymError):
    """会员套餐不存在"""
    pass


class ValidationError(GymError):
    """数据验证错误"""
    pass


class InsufficientFundsError(GymError):
    """可用余额不足"""

    def __init__(self, available, required):
        self.available = available
        self.required = required
        super().__init__(f"可用余额不足: 可用 ${available:,.2f}, 需要 ${required:,.2f}")


class AlreadyPaidError(GymError):
    """订单重复付款"""
    pass


class LedgerBusyError(GymError):
    """账本锁等待超时"""
    pass
