from .messages import MessageService
from .products import ProductService
from .trades import TradeService

__all__ = ["MessageService", "ProductService", "TradeService"]
