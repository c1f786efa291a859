from .cash import CashState, CashMovement
from .sales import Sale, SaleItem
from .withdrawals import Withdrawal
from .settings import AppSetting

__all__ = [
    'CashState', 'CashMovement',
    'Sale', 'SaleItem', 'Withdrawal',
    'AppSetting',
]
