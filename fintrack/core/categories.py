"""
Transaction categories.
Shared by input validation and the analytics views.
"""

# Expense-side categories
EXPENSE_CATEGORIES = [
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Healthcare",
    "Utilities",
    "Education",
    "Travel",
    "Others",
]

# Income-side categories
INCOME_CATEGORIES = [
    "Salary",
    "Business",
    "Investment",
    "Others",
]

# All valid category values, in display order
CATEGORIES = [c for c in EXPENSE_CATEGORIES if c != "Others"] + INCOME_CATEGORIES

DEFAULT_CATEGORY = "Others"


def is_valid_category(category: str) -> bool:
    return category in CATEGORIES
