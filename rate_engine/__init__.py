"""
Rate Engine

Interest and rate calculation engine for insurance cash-value, policy-loan,
dividend and free-look refund figures. All rates are expressed in
ten-thousandths and all arithmetic uses Decimal.
"""

__version__ = "1.0.0"
