"""
Presenters for text output
"""

from orderdesk.presenters.order_presenter import OrderPresenter


__all__ = ["OrderPresenter"]
