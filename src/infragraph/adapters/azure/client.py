"""Paging over Azure Resource Manager list endpoints."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .schema import ArmErrorResponse, ArmListPage

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from infragraph.adapters.http_resilience import ResilientClient

log = getLogger(__name__)


class ArmRequestError(RuntimeError):
    def __init__(self, message: str, *, status_code: int, code: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class ArmPager:
    """Follows ``nextLink`` until the service stops returning one."""

    def __init__(
        self,
        client: ResilientClient,
        url: str,
        *,
        token: str,
        params: Mapping[str, str] | None = None,
    ) -> None:
        self._client = client
        self._next_url: str | None = url
        self._params = dict(params) if params else None
        self._headers = {"Authorization": f"Bearer {token}"}

    def has_more(self) -> bool:
        return self._next_url is not None

    async def next_page(self) -> list[dict[str, object]]:
        if self._next_url is None:
            return []
        response = await self._client.get(
            self._next_url, params=self._params, headers=self._headers
        )
        _raise_for_arm_error(response)
        page = ArmListPage.model_validate(response.json())
        # nextLink already carries the query string
        self._params = None
        self._next_url = page.next_link or None
        log.debug("ARM page %s: %d item(s)", response.request.url.path, len(page.value))
        return page.value


def _raise_for_arm_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    code = ""
    message = response.reason_phrase
    try:
        error = ArmErrorResponse.model_validate(response.json())
    except ValueError:
        pass
    else:
        code = error.error.code
        message = error.error.message or message
    detail = f"{code}: {message}" if code else message
    raise ArmRequestError(
        f"ARM request failed with {response.status_code}: {detail}",
        status_code=response.status_code,
        code=code,
    )
