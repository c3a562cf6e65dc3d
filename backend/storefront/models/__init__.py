from .customer import Customer
from .address import Address
from .category import Category
from .product import Product
from .order import Order, ORDER_STATUSES, STATUS_COMPLETE, STATUS_INCOMPLETE
from .cart import Cart, CartItem, cart_total
from .session import SessionRecord

__all__ = [
    'Customer', 'Address', 'Category', 'Product',
    'Order', 'ORDER_STATUSES', 'STATUS_COMPLETE', 'STATUS_INCOMPLETE',
    'Cart', 'CartItem', 'cart_total',
    'SessionRecord',
]
