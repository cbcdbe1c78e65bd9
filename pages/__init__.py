"""页面模块导出"""
from .dashboard import page_dashboard
from .reception import page_reception
from .finance import page_finance
from .payroll import page_payroll
from .inventory import page_inventory
from .staff import page_staff
from .trainer import page_trainer

__all__ = [
    'page_dashboard', 'page_reception', 'page_finance', 'page_payroll',
    'page_inventory', 'page_staff', 'page_trainer'
]
