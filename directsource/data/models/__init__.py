#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w Base.metadata

from directsource.data.models.user import UserModel
from directsource.data.models.manufacturer import ManufacturerModel
from directsource.data.models.cart_item import CartItemModel
from directsource.data.models.order import OrderModel

__all__ = ["UserModel", "ManufacturerModel", "CartItemModel", "OrderModel"]
