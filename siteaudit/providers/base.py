"""
Collaborator interfaces and shared HTTP plumbing for external data providers.

The analysis pipeline depends only on the Protocols below; the concrete
clients in this package implement them over httpx.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx
import structlog
from httpx import HTTPStatusError, TimeoutException, TransportError

from siteaudit.core.exceptions import ExternalServiceError, RateLimitError
from siteaudit.core.models import RegistryRecord, VolumeData
from siteaudit.utils.reliability import with_retry

logger = structlog.get_logger(__name__)


class VolumeProvider(Protocol):
    async def get_search_volumes(self, keywords: Sequence[str], country: str) -> List[VolumeData]:
        ...


class SerpPositionProvider(Protocol):
    async def check_keyword_position(self, keyword: str, domain: str) -> Optional[int]:
        ...


class SuggestionProvider(Protocol):
    async def suggest(self, seed: str) -> List[str]:
        ...


class RegistryProvider(Protocol):
    async def lookup(self, company_name: str) -> Optional[RegistryRecord]:
        ...


class HttpProvider:
    """
    Base for provider clients.

    Each request opens a short-lived ``httpx.AsyncClient``, so a client object
    can be shared by analyses running on different event loops. HTTP errors
    become ExternalServiceError; 429 responses and timeouts become retryable.
    """

    service_name = "provider"

    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers=self._headers(),
            follow_redirects=True,
            transport=self.transport,
        )

    @with_retry(max_attempts=3, backoff_max=8.0, retry_exceptions=(RateLimitError, TimeoutException))
    async def _request(self, method: str, url: str, **kwargs) -> Any:
        """
        Make a request and return the decoded JSON body.

        Raises:
            RateLimitError: On HTTP 429
            ExternalServiceError: On any other HTTP or transport error
        """
        logger.debug("Provider request", service=self.service_name, method=method, url=url)
        try:
            async with self._client() as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json()

        except HTTPStatusError as e:
            status = e.response.status_code
            logger.error(
                "Provider HTTP error",
                service=self.service_name,
                status_code=status,
                response_text=e.response.text[:500],
            )
            if status == 429:
                retry_after = e.response.headers.get("retry-after")
                raise RateLimitError(
                    f"{self.service_name} rate limited",
                    retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
                )
            raise ExternalServiceError(self.service_name, f"HTTP {status}", status_code=status)

        except TimeoutException as e:
            logger.error("Provider timeout", service=self.service_name, error=str(e))
            raise

        except TransportError as e:
            logger.error("Provider transport error", service=self.service_name, error=str(e))
            raise ExternalServiceError(self.service_name, str(e))

        except ValueError as e:
            raise ExternalServiceError(self.service_name, f"Invalid JSON response: {e}")
