"""Infrastructure ORM Models"""

from .user_model import UserModel
from .token_model import UserTokenModel, RevokedTokenModel
from .product_model import ProductModel
from .cart_model import CartItemModel
from .order_model import OrderModel, OrderItemModel
from .notification_model import NotificationModel
from .contact_model import ContactMessageModel

__all__ = [
    'UserModel',
    'UserTokenModel',
    'RevokedTokenModel',
    'ProductModel',
    'CartItemModel',
    'OrderModel',
    'OrderItemModel',
    'NotificationModel',
    'ContactMessageModel',
]
