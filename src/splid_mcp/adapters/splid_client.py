"""Splid backend API client."""

import json
from dataclasses import dataclass
from typing import Protocol

import httpx

DEFAULT_BASE_URL = "https://splid.herokuapp.com/parse"
# Public Parse keys shipped with the Splid apps and the splid-js client.
DEFAULT_APP_ID = "AKCaB0FCcx9tHyPmsfLuBJ4gDcDXALh85qr8lY14"
DEFAULT_CLIENT_KEY = "4Y4OVLaYpJH7MP6Yg5aelbb6vPNQkgpgV3EB4fWE"
_MEMBER_PAGE_SIZE = 1000


class SplidClient(Protocol):
    """Interface for Splid backend interactions."""

    async def join_group(self, code: str) -> str:
        """Resolve an invite code and return the group object id."""

    async def get_group_info(self, group_id: str) -> dict[str, object]:
        """Return the group info record for a group."""

    async def get_persons(self, group_id: str) -> list[dict[str, object]]:
        """Return the person records of a group."""

    async def get_entries(
        self, group_id: str, skip: int, limit: int
    ) -> list[dict[str, object]]:
        """Return entry records of a group, newest first."""

    async def create_entry(self, entry: dict[str, object]) -> dict[str, object]:
        """Create an entry record and return the stored fields."""


def group_pointer(group_id: str) -> dict[str, str]:
    """Return a Parse pointer to a group object."""
    return {"__type": "Pointer", "className": "Group", "objectId": group_id}


@dataclass
class HttpxSplidClient(SplidClient):
    """Splid client implemented with httpx against the Parse REST API."""

    base_url: str
    app_id: str
    client_key: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, app_id: str, client_key: str, base_url: str = DEFAULT_BASE_URL
    ) -> "HttpxSplidClient":
        """Create a Splid client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            app_id=app_id,
            client_key=client_key,
            http_client=httpx.AsyncClient(),
        )

    def _headers(self) -> dict[str, str]:
        return {
            "X-Parse-Application-Id": self.app_id,
            "X-Parse-Client-Key": self.client_key,
        }

    async def join_group(self, code: str) -> str:
        """Resolve an invite code via the joinGroupWithAnyCode function."""
        url = f"{self.base_url}/functions/joinGroupWithAnyCode"
        response = await self.http_client.post(
            url, json={"code": code}, headers=self._headers(), timeout=15
        )
        response.raise_for_status()
        result = response.json().get("result") or {}
        group_id = result.get("objectId")
        if not isinstance(group_id, str):
            raise RuntimeError("Splid did not return a group for the invite code")
        return group_id

    async def get_group_info(self, group_id: str) -> dict[str, object]:
        """Fetch the GroupInfo record of a group."""
        results = await self._query("GroupInfo", group_id, limit=1)
        if not results:
            raise RuntimeError(f"Splid group info not found for group {group_id}")
        return results[0]

    async def get_persons(self, group_id: str) -> list[dict[str, object]]:
        """Fetch Person records of a group."""
        return await self._query("Person", group_id, limit=_MEMBER_PAGE_SIZE)

    async def get_entries(
        self, group_id: str, skip: int, limit: int
    ) -> list[dict[str, object]]:
        """Fetch Entry records of a group, newest first."""
        return await self._query(
            "Entry", group_id, limit=limit, skip=skip, order="-createdAt"
        )

    async def create_entry(self, entry: dict[str, object]) -> dict[str, object]:
        """Create an Entry record."""
        url = f"{self.base_url}/classes/Entry"
        response = await self.http_client.post(
            url, json=entry, headers=self._headers(), timeout=15
        )
        response.raise_for_status()
        return {**entry, **response.json()}

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _query(
        self,
        class_name: str,
        group_id: str,
        *,
        limit: int,
        skip: int = 0,
        order: str | None = None,
    ) -> list[dict[str, object]]:
        url = f"{self.base_url}/classes/{class_name}"
        params: dict[str, object] = {
            "where": json.dumps({"group": group_pointer(group_id)}),
            "limit": limit,
        }
        if skip:
            params["skip"] = skip
        if order is not None:
            params["order"] = order
        response = await self.http_client.get(
            url, params=params, headers=self._headers(), timeout=15
        )
        response.raise_for_status()
        results = response.json().get("results")
        if not isinstance(results, list):
            raise RuntimeError(f"Unexpected Splid response for {class_name}")
        return results
