"""
Services package

Business logic for the ledger, budgets, goals, statistics and accounts.
"""

from .auth_service import AuthService
from .budget_service import BudgetService
from .category_service import CategoryService
from .goal_service import GoalService
from .preference_service import PreferenceService
from .statistics_service import StatisticsService
from .transaction_service import TransactionFilters, TransactionService

__all__ = [
    "AuthService",
    "BudgetService",
    "CategoryService",
    "GoalService",
    "PreferenceService",
    "StatisticsService",
    "TransactionFilters",
    "TransactionService",
]
