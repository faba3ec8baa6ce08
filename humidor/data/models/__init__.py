# import all models so SQLAlchemy registers them on Base.metadata

from humidor.data.models.user import UserModel
from humidor.data.models.address import AddressModel
from humidor.data.models.product import ProductModel, VariantModel
from humidor.data.models.cart import CartModel
from humidor.data.models.cart_item import CartItemModel
from humidor.data.models.order import OrderModel, OrderItemModel, PaymentModel

__all__ = [
    "UserModel",
    "AddressModel",
    "ProductModel",
    "VariantModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "PaymentModel",
]
