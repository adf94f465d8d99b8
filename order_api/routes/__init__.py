from . import authentication, customers, order_items, orders

__all__ = ["authentication", "customers", "order_items", "orders"]
