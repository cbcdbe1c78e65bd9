"""工具函数模块"""
from .helpers import to_decimal, format_money, period_key, generate_password, mask_email
from .transaction import transaction_scope

__all__ = ['to_decimal', 'format_money', 'period_key', 'generate_password', 'mask_email',
           'transaction_scope']
