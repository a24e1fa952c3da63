from .gateway import BasePaymentGateway, get_gateway
from .stub import StubGateway

__all__ = [
    "BasePaymentGateway",
    "get_gateway",
    "StubGateway",
]
