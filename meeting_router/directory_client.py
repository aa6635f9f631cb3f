"""
Airtable client for the agents directory.

The directory is the system of record for agents: names, contact details,
routing flags and booking caps. It is read fresh on every request.
"""

from __future__ import annotations

import math
from typing import Any, AsyncIterator, Optional

import httpx

from meeting_router.config import config
from meeting_router.errors import ConfigurationError, DirectoryFetchError
from meeting_router.language.fields_he import AGENT_FIELDS, SPECIALIZATION_FIELDS
from meeting_router.logging_config import get_logger
from meeting_router.models import DirectoryRecord, Specialization

logger = get_logger(__name__)


def _as_int(value: Any) -> Optional[int]:
    """Airtable number columns arrive as int, float or (for formulas) str."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return None
    return None


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_agent_record(record: dict) -> DirectoryRecord:
    """Build a DirectoryRecord from one raw Airtable record."""
    fields = record.get("fields") or {}

    # Airtable omits unchecked checkboxes, so only True flags are ever present
    category_flags = {name: value for name, value in fields.items() if isinstance(value, bool)}

    return DirectoryRecord(
        id=record["id"],
        first_name=_as_str(fields.get(AGENT_FIELDS["first_name"])) or "",
        last_name=_as_str(fields.get(AGENT_FIELDS["last_name"])) or "",
        email=_as_str(fields.get(AGENT_FIELDS["email"])),
        phone=_as_str(fields.get(AGENT_FIELDS["phone"])),
        category_flags=category_flags,
        block_status=_as_str(fields.get(AGENT_FIELDS["block_status"])),
        daily_limit=_as_int(fields.get(AGENT_FIELDS["daily_limit"])),
        monthly_limit=_as_int(fields.get(AGENT_FIELDS["monthly_limit"])),
        weight=_as_int(fields.get(AGENT_FIELDS["weight"])),
    )


class AirtableDirectoryClient:
    """Reads the agents and specializations tables."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        # transport is injectable so tests can serve canned Airtable responses
        self._transport = transport

    def ensure_configured(self) -> None:
        """Raise ConfigurationError when the agents table cannot be addressed."""
        if not config.has_directory_config():
            raise ConfigurationError("Missing Airtable configuration")

    def _table_url(self, table_id: str) -> str:
        return f"{config.AIRTABLE_API_BASE_URL.rstrip('/')}/{config.AIRTABLE_BASE_ID}/{table_id}"

    async def _iter_record_pages(self, table_id: str) -> AsyncIterator[list[dict]]:
        """Yield pages of raw records, following Airtable's ``offset`` token."""
        url = self._table_url(table_id)
        headers = {"Authorization": f"Bearer {config.AIRTABLE_API_TOKEN}"}
        offset: Optional[str] = None

        async with httpx.AsyncClient(
            timeout=config.HTTP_TIMEOUT_SECONDS,
            transport=self._transport,
        ) as client:
            while True:
                params = {"offset": offset} if offset else None
                try:
                    resp = await client.get(url, headers=headers, params=params)
                except httpx.HTTPError as e:
                    raise DirectoryFetchError(f"Airtable request failed: {e}") from e

                if not resp.is_success:
                    raise DirectoryFetchError(
                        f"Airtable API error: {resp.status_code}",
                        status_code=resp.status_code,
                        response_data={"body": resp.text[:500]},
                    )

                try:
                    data = resp.json()
                except ValueError as e:
                    raise DirectoryFetchError(f"Invalid Airtable response: {e}") from e

                yield data.get("records") or []

                offset = data.get("offset")
                if not offset:
                    return

    async def list_agents(self) -> list[DirectoryRecord]:
        """Fetch every agent record. Any failed page fails the whole roster."""
        self.ensure_configured()

        records: list[DirectoryRecord] = []
        async for page in self._iter_record_pages(config.AIRTABLE_AGENTS_TABLE_ID):
            records.extend(parse_agent_record(raw) for raw in page if raw.get("id"))

        logger.debug("directory_agents_fetched", count=len(records))
        return records

    async def list_specializations(self) -> list[Specialization]:
        """Fetch the lead categories table (unsorted)."""
        if not config.has_specializations_config():
            raise ConfigurationError("Missing Airtable configuration")

        name_field = SPECIALIZATION_FIELDS["name"]
        specializations: list[Specialization] = []
        async for page in self._iter_record_pages(config.AIRTABLE_SPECIALIZATIONS_TABLE_ID):
            for raw in page:
                name = _as_str((raw.get("fields") or {}).get(name_field))
                if raw.get("id") and name:
                    specializations.append(Specialization(id=raw["id"], name=name))

        logger.debug("directory_specializations_fetched", count=len(specializations))
        return specializations
