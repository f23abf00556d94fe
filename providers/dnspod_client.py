"""
providers/dnspod_client.py

Responsibility: Implements the DNSProvider protocol using the legacy DNSPod
token API (https://dnsapi.cn), which addresses records by domain + sub-domain
through form-encoded POST calls.
Does NOT: split domain names, read configuration, or decide whether an update
is needed.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ValidationError

from exceptions import MalformedResponse, OperationFailed
from providers.dns_provider import DnsRecord, record_type_for

logger = logging.getLogger(__name__)

_DNSPOD_BASE = "https://dnsapi.cn"

# "Default" resolution line: create takes the line name, Record.Ddns the line id
_DEFAULT_LINE = "默认"
_DEFAULT_LINE_ID = "0"


class _DnspodRecord(BaseModel):
    id: str
    name: str
    value: str
    updated_on: str = ""
    line_id: str = ""


class _DnspodListResponse(BaseModel):
    records: list[_DnspodRecord]


class DnspodClient:
    """
    Implements DNSProvider for one sub-domain of a DNSPod domain.

    Only the list call parses the response; create and dynamic-update calls
    succeed as soon as a response body can be read. The list endpoint does
    not report a usable type, so fetched records are always typed "A".

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        login_token: str,
        domain: str,
        sub_domain: str,
    ) -> None:
        """
        Initialises the client for one record.

        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            login_token: The DNSPod API token in "id,token" form.
            domain: The root domain, e.g. "example.com".
            sub_domain: The record label, e.g. "home" or "@" for the apex.
        """
        self._client = http_client
        self._login_token = login_token
        self._domain = domain
        self._sub_domain = sub_domain

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def sub_domain(self) -> str:
        return self._sub_domain

    # ---------------------------------------------------------------------------
    # DNSProvider implementation
    # ---------------------------------------------------------------------------

    async def get_record(self) -> DnsRecord | None:
        """
        Lists records for (domain, sub_domain) and returns the first one.

        Returns:
            A DnsRecord typed "A", or None if the list is empty.

        Raises:
            OperationFailed: If the request cannot be sent or read.
            MalformedResponse: If the body has no record list.
        """
        params = self._common_params()
        params["sub_domain"] = self._sub_domain

        text = await self._post("Record.List", params)
        try:
            response = _DnspodListResponse.model_validate_json(text)
        except ValidationError as exc:
            logger.warning("Error parsing dnspod result: %s", text)
            raise MalformedResponse(
                f"Unexpected DNSPod response for Record.List ({self._sub_domain}.{self._domain})",
                body=text,
            ) from exc

        if not response.records:
            return None

        record = response.records[0]
        logger.info("Current dnspod record is %s", record)
        return DnsRecord(
            id=record.id,
            name=record.name,
            value=record.value,
            record_type="A",
        )

    async def modify_record(self, new_ip: str, record: DnsRecord) -> None:
        """
        Points an existing record at new_ip through the Record.Ddns endpoint.

        Raises:
            OperationFailed: If the request cannot be sent or read.
        """
        params = self._common_params()
        params.update(
            {
                "sub_domain": record.name,
                "record_id": record.id,
                "record_line_id": _DEFAULT_LINE_ID,
                "record_type": record_type_for(new_ip),
                "value": new_ip,
            }
        )

        try:
            text = await self._post("Record.Ddns", params)
        except OperationFailed as exc:
            logger.info("Error modifying record: %s", exc)
            raise OperationFailed("Error modifying record") from exc
        logger.info("Modify result is: %s", text)

    async def add_record(self, new_ip: str) -> None:
        """
        Creates the configured sub-domain record pointing at new_ip.

        Raises:
            OperationFailed: If the request cannot be sent or read.
        """
        params = self._common_params()
        params.update(
            {
                "sub_domain": self._sub_domain,
                "record_type": record_type_for(new_ip),
                "record_line": _DEFAULT_LINE,
                "value": new_ip,
            }
        )

        try:
            text = await self._post("Record.Create", params)
        except OperationFailed as exc:
            logger.info("Error adding record: %s", exc)
            raise OperationFailed("Error adding record") from exc
        logger.info("Add result is: %s", text)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _common_params(self) -> dict[str, str]:
        """Returns the parameters every DNSPod call requires."""
        return {
            "login_token": self._login_token,
            "format": "json",
            "error_on_empty": "no",
            "lang": "en",
            "domain": self._domain,
        }

    async def _post(self, endpoint: str, params: dict[str, str]) -> str:
        """
        POSTs form-encoded params to an endpoint and returns the body text.

        Raises:
            OperationFailed: On connection failure or an unreadable body.
        """
        url = f"{_DNSPOD_BASE}/{endpoint}"
        logger.debug("POST %s sub_domain=%s", url, params.get("sub_domain"))
        try:
            response = await self._client.post(url, data=params)
            return response.text
        except (httpx.RequestError, UnicodeDecodeError) as exc:
            raise OperationFailed(f"Error calling DNSPod {endpoint}: {exc}") from exc
