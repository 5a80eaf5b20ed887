"""Travel supplier gateway: Amadeus client and its mock stand-in."""

from core.supplier.amadeus import AmadeusGateway
from core.supplier.interface import SupplierGateway
from core.supplier.mock import MockSupplierGateway
from core.supplier.token_cache import AccessTokenCache

__all__ = ["AccessTokenCache", "AmadeusGateway", "MockSupplierGateway", "SupplierGateway"]
