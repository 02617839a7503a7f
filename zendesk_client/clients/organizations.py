"""Organizations API.

See https://developer.zendesk.com/api-reference/ticketing/organizations/organizations/
"""

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union

from zendesk_client.clients.base import ResourceClient
from zendesk_client.clients.pagination import AggregatedResult
from zendesk_client.clients.transport import ApiResponse

logger = logging.getLogger(__name__)

StartTime = Union[int, datetime]


def _count_value(response: ApiResponse) -> int:
    count = response.result.get("count")
    # {"count": {"value": 102, "refreshed_at": "..."}}
    if isinstance(count, dict):
        return count.get("value")
    return count


class Organizations:
    """Wrapper for the organizations endpoints.

    Each method only names its path segments and verb; the shared
    ``ResourceClient`` does the HTTP work.
    """

    JSON_NAMES = ("organizations", "organization")

    def __init__(self, client: ResourceClient):
        self.client = client

    def _get_all(self, segments: list, cancel=None) -> AggregatedResult:
        return self.client.get_all(segments, result_keys=self.JSON_NAMES, cancel=cancel)

    def list(self, cancel=None) -> AggregatedResult:
        """List all organizations."""
        return self._get_all(["organizations"], cancel=cancel)

    def list_by_user(self, user_id: int) -> AggregatedResult:
        """List organizations a user belongs to."""
        return self._get_all(["users", user_id, "organizations"])

    def count(self) -> int:
        """Approximate number of organizations."""
        return _count_value(self.client.get(["organizations", "count"]))

    def count_by_user(self, user_id: int) -> int:
        return _count_value(self.client.get(["users", user_id, "organizations", "count"]))

    def related(self, organization_id: int) -> ApiResponse:
        """Ticket and user counts for an organization."""
        return self.client.get(["organizations", organization_id, "related"])

    def show(self, organization_id: int) -> ApiResponse:
        return self.client.get(["organizations", organization_id])

    def show_many(self, organization_ids: Iterable[int]) -> AggregatedResult:
        """Show up to 100 organizations by id."""
        return self._get_all(["organizations", "show_many", {"ids": list(organization_ids)}])

    def show_many_by_external_ids(self, external_ids: Iterable[str]) -> AggregatedResult:
        return self._get_all(
            ["organizations", "show_many", {"external_ids": list(external_ids)}]
        )

    def create(self, organization: Mapping[str, Any]) -> ApiResponse:
        """Create an organization.

        Args:
            organization: Payload, e.g. ``{"organization": {"name": "Acme"}}``
        """
        return self.client.post(["organizations"], organization)

    def create_many(self, organizations: Mapping[str, Any]) -> ApiResponse:
        """Bulk create; the response carries a ``job_status``."""
        return self.client.post(["organizations", "create_many"], organizations)

    def create_or_update(self, organization: Mapping[str, Any]) -> ApiResponse:
        return self.client.post(["organizations", "create_or_update"], organization)

    def upsert(self, organization: Mapping[str, Any]) -> ApiResponse:
        """Alias of ``create_or_update``."""
        return self.create_or_update(organization)

    def update(self, organization_id: int, organization: Mapping[str, Any]) -> ApiResponse:
        return self.client.put(["organizations", organization_id], organization)

    def update_many(self, organizations: Mapping[str, Any]) -> ApiResponse:
        """Bulk update; the response carries a ``job_status``."""
        return self.client.put(["organizations", "update_many"], organizations)

    def delete(self, organization_id: int) -> ApiResponse:
        return self.client.delete(["organizations", organization_id])

    def bulk_delete(self, organization_ids: Iterable[int]) -> ApiResponse:
        """Delete many organizations by id; returns a ``job_status``."""
        return self.client.delete(
            ["organizations", "destroy_many", {"ids": list(organization_ids)}]
        )

    def bulk_delete_by_external_id(self, external_ids: Iterable[str]) -> ApiResponse:
        return self.client.delete(
            ["organizations", "destroy_many", {"external_ids": list(external_ids)}]
        )

    def search(self, external_id: Union[int, str]) -> AggregatedResult:
        """Find organizations by external id."""
        return self._get_all(["organizations", "search", {"external_id": external_id}])

    def autocomplete(self, parameters: Mapping[str, Any]) -> AggregatedResult:
        """Organizations whose name starts with ``parameters["name"]``."""
        return self._get_all(["organizations", "autocomplete", dict(parameters)])

    def incremental(self, start_time: StartTime, cancel=None) -> AggregatedResult:
        """Incremental export of organizations changed since ``start_time``."""
        return self._get_all(
            ["incremental", "organizations", {"start_time": start_time}], cancel=cancel
        )

    def incremental_include(
        self,
        start_time: StartTime,
        include: Optional[str],
        cancel=None,
    ) -> AggregatedResult:
        return self._get_all(
            ["incremental", "organizations", {"start_time": start_time, "include": include}],
            cancel=cancel,
        )

    def incremental_sample(self, start_time: StartTime) -> ApiResponse:
        """Single page sample of the incremental export."""
        return self.client.get(
            ["incremental", "organizations", "sample", {"start_time": start_time}]
        )
