"""
orderdesk - customer-specific pricing and order lifecycle engine
"""

__version__ = "1.0.0"
