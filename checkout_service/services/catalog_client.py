import httpx
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Dict, Any

from ..config import settings
from ..exceptions import CatalogUnavailable
from ..schemas.catalog import Listing, VendorSummary
from .photos import primary_photo_url

logger = logging.getLogger(__name__)


class CatalogClient:
    """Клиент для чтения листингов и профилей продавцов из каталога"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or settings.catalog_service_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.catalog_timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def get_listing(self, listing_id: str) -> Optional[Listing]:
        """Получить листинг. None если не найден, CatalogUnavailable если каталог недоступен"""
        try:
            async with self._client() as client:
                response = await client.get(f"/listings/{listing_id}")
        except httpx.TimeoutException as e:
            logger.error(f"❌ Timeout when fetching listing {listing_id}")
            raise CatalogUnavailable() from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Error fetching listing {listing_id}: {e}")
            raise CatalogUnavailable() from e

        if response.status_code == 404:
            logger.warning(f"⚠️ Listing {listing_id} not found in catalog")
            return None
        if response.status_code != 200:
            logger.error(f"❌ Error fetching listing {listing_id}: {response.status_code}")
            raise CatalogUnavailable()

        try:
            return self._parse_listing(response.json())
        except (ValueError, KeyError) as e:
            logger.error(f"❌ Malformed listing {listing_id} from catalog: {e}")
            raise CatalogUnavailable() from e

    async def get_vendor(self, vendor_id: str) -> Optional[VendorSummary]:
        """Профиль продавца для шапки корзины. Ошибки не критичны"""
        try:
            async with self._client() as client:
                response = await client.get(f"/vendors/{vendor_id}")

            if response.status_code == 200:
                return VendorSummary.model_validate(response.json())
            elif response.status_code == 404:
                logger.warning(f"⚠️ Vendor {vendor_id} not found in catalog")
            else:
                logger.warning(f"⚠️ Error fetching vendor {vendor_id}: {response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Error fetching vendor {vendor_id}: {e}")
        except ValueError as e:
            logger.warning(f"⚠️ Malformed vendor {vendor_id} from catalog: {e}")
        return None

    @staticmethod
    def _parse_listing(data: Dict[str, Any]) -> Listing:
        vendor_id = data.get("vendor_id") or data.get("business_id")
        if not vendor_id:
            raise ValueError("listing has no vendor")

        price = data.get("price")
        if price is not None:
            try:
                price = Decimal(str(price))
            except InvalidOperation as e:
                raise ValueError(f"invalid price {price!r}") from e

        return Listing(
            id=str(data["id"]),
            vendor_id=str(vendor_id),
            title=data.get("title") or "",
            price=price,
            photo_url=primary_photo_url(data.get("photo_url"))
        )
