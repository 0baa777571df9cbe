"""
FreshBooks SDK - High-level client with nice ergonomics.

This layer provides a clean, typed interface for FreshBooks resources.
Built on top of the core APIClient.
"""

import builtins
import urllib.parse
from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any, Generic, TypeVar

from freshbooks_cli.core.builders import (
    MAX_PER_PAGE,
    IncludesBuilder,
    PaginateBuilder,
    QueryBuilder,
    build_query_string,
)
from freshbooks_cli.core.client import APIClient
from freshbooks_cli.core.config import ClientConfig
from freshbooks_cli.core.errors import ConfigurationError
from freshbooks_cli.core.transport import Transport
from freshbooks_cli.core.types import (
    Client,
    DataModel,
    Identity,
    Invoice,
    ListResult,
    PaginationMeta,
    Payment,
    Tax,
    TeamMember,
)

T = TypeVar("T")

ACCOUNTING_PREFIX = "/accounting/account"
BUSINESS_PREFIX = "/auth/api/v1/businesses"
CURRENT_USER_PATH = "/auth/api/v1/users/me"


# =============================================================================
# Deserializers
# =============================================================================


def single_parser(model: type[DataModel], single_name: str | None = None) -> Callable[[Any], Any]:
    """
    Build a parser for single-item payloads.

    Accounting endpoints wrap the item in its singular name
    (``{"client": {...}}``); business endpoints return it bare. Anything
    other than an object raises UnexpectedResponseShapeError.
    """

    def parse(payload: Any) -> Any:
        if single_name and isinstance(payload, Mapping) and single_name in payload:
            payload = payload[single_name]
        return model.from_dict(payload)

    return parse


def list_parser(
    item_parser: Callable[[Any], T],
    list_name: str | None = None,
) -> Callable[[Any], ListResult[T]]:
    """
    Build a parser for list payloads.

    Handles the three shapes list calls produce:
    - ``{"result": [...], "meta": {...}}`` (business endpoints)
    - ``{"<list_name>": [...], "page": .., "pages": .., ...}`` (accounting endpoints)
    - a bare list with no pagination at all
    """

    def parse(payload: Any) -> ListResult[T]:
        if isinstance(payload, Mapping) and "meta" in payload:
            items = payload.get("result") or []
            meta = PaginationMeta.from_dict(payload["meta"])
        elif isinstance(payload, Mapping):
            items = payload.get(list_name or "result") or []
            meta = PaginationMeta.from_dict(payload)
        else:
            items = list(payload or [])
            meta = PaginationMeta(total=len(items), per_page=len(items), page=1, pages=1)
        return ListResult(items=[item_parser(item) for item in items], meta=meta)

    return parse


# =============================================================================
# Resource Accessor
# =============================================================================


class ResourceAccessor(Generic[T]):
    """
    Get, list, create, update and delete for one kind of resource.

    URLs are ``{url_prefix}/{account_id}/{path}[/{resource_id}]``.

    Example:
        clients = client.clients
        page = clients.list(account_id, [PaginateBuilder(1, 25)])
        first = clients.get(account_id, page.items[0].id)

    """

    def __init__(
        self,
        client: APIClient,
        url_prefix: str,
        path: str,
        parse_single: Callable[[Any], T],
        parse_list: Callable[[Any], ListResult[T]],
        single_name: str | None = None,
    ):
        self._client = client
        self.url_prefix = url_prefix.rstrip("/")
        self.path = path.strip("/")
        self._parse_single = parse_single
        self._parse_list = parse_list
        self.single_name = single_name

    @classmethod
    def for_model(
        cls,
        client: APIClient,
        url_prefix: str,
        path: str,
        model: type[DataModel],
        single_name: str | None = None,
        list_name: str | None = None,
    ) -> "ResourceAccessor":
        item_parser = single_parser(model, single_name)
        return cls(
            client,
            url_prefix,
            path,
            item_parser,
            list_parser(model.from_dict, list_name),
            single_name=single_name,
        )

    def _url(self, account_id: str, resource_id: int | str | None = None) -> str:
        url = f"{self.url_prefix}/{account_id}/{self.path}"
        if resource_id is not None:
            url = f"{url}/{resource_id}"
        return url

    def _body(self, data: dict[str, Any] | DataModel) -> dict[str, Any]:
        if isinstance(data, DataModel):
            data = data.to_dict()
        if self.single_name:
            return {self.single_name: data}
        return data

    def get(
        self,
        account_id: str,
        resource_id: int | str,
        includes: IncludesBuilder | None = None,
    ) -> T:
        """
        Get a single resource by ID.

        Args:
            account_id: The account (or business) ID
            resource_id: ID of the resource to return
            includes: Related data to include

        Returns:
            The resource model

        """
        url = self._url(account_id, resource_id) + build_query_string([includes])
        return self._client.get(url).parse(self._parse_single)

    def list(
        self,
        account_id: str,
        builders: Sequence[QueryBuilder | None] | None = None,
    ) -> ListResult[T]:
        """
        Get a page of resources.

        Args:
            account_id: The account (or business) ID
            builders: Filters, pagination, includes and sort

        Returns:
            ListResult with the items and pagination meta

        """
        url = self._url(account_id) + build_query_string(builders)
        return self._client.get(url).with_pagination().parse(self._parse_list)

    def list_all(
        self,
        account_id: str,
        builders: Sequence[QueryBuilder | None] | None = None,
    ) -> builtins.list[T]:
        """Fetch every page of resources."""
        return builtins.list(self.iterate(account_id, builders))

    def iterate(
        self,
        account_id: str,
        builders: Sequence[QueryBuilder | None] | None = None,
        per_page: int = MAX_PER_PAGE,
    ) -> Iterator[T]:
        """
        Iterate through all pages of resources.

        Any PaginateBuilder in ``builders`` is replaced by the iterator's own.

        Yields:
            Items from all pages

        """
        others = [b for b in builders or () if not isinstance(b, PaginateBuilder)]
        page = 1

        while True:
            result = self.list(account_id, others + [PaginateBuilder(page, per_page)])
            yield from result.items

            if not result.items or result.meta.page >= result.meta.pages:
                break
            page += 1

    def create(self, account_id: str, data: dict[str, Any] | DataModel) -> T:
        """
        Create a resource.

        Args:
            account_id: The account (or business) ID
            data: Field values, as a wire-format dict or a model

        Returns:
            The created resource

        """
        envelope = self._client.post(self._url(account_id), self._body(data))
        return envelope.parse(self._parse_single)

    def update(
        self,
        account_id: str,
        resource_id: int | str,
        data: dict[str, Any] | DataModel,
    ) -> T:
        """Update a resource and return its new state."""
        envelope = self._client.put(self._url(account_id, resource_id), self._body(data))
        return envelope.parse(self._parse_single)

    def delete(self, account_id: str, resource_id: int | str) -> T:
        """Delete a resource and return the deleted record."""
        return self._client.delete(self._url(account_id, resource_id)).parse(self._parse_single)


# =============================================================================
# Client
# =============================================================================


class FreshBooksClient:
    """
    High-level FreshBooks API client with one accessor per resource.

    Example:
        client = FreshBooksClient(client_id="...", access_token="...")

        identity = client.current_user()
        account_id = identity.business_memberships[0].business.account_id

        clients = client.clients.list(account_id, [PaginateBuilder(1, 10)])
        invoice = client.invoices.get(account_id, 1234, IncludesBuilder(["lines"]))

    """

    def __init__(
        self,
        client_id: str | None = None,
        access_token: str | None = None,
        redirect_uri: str | None = None,
        client_secret: str | None = None,
        api_base_url: str | None = None,
        auth_base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
    ):
        """
        Initialize the FreshBooks client.

        Args:
            client_id: OAuth application client ID (or FRESHBOOKS_CLIENT_ID env var)
            access_token: OAuth bearer token (or FRESHBOOKS_ACCESS_TOKEN env var)
            redirect_uri: OAuth redirect URI (or FRESHBOOKS_REDIRECT_URI env var)
            client_secret: OAuth application secret (or FRESHBOOKS_CLIENT_SECRET env var)
            api_base_url: API base URL (or FRESHBOOKS_API_BASE_URL env var)
            auth_base_url: Auth base URL (or FRESHBOOKS_AUTH_BASE_URL env var)
            user_agent: Custom User-Agent header
            timeout: Request timeout in seconds
            config: Complete config; when given the other settings are ignored
            transport: HTTP transport override

        """
        self.config = config or ClientConfig.from_env(
            client_id=client_id,
            access_token=access_token,
            redirect_uri=redirect_uri,
            client_secret=client_secret,
            api_base_url=api_base_url,
            auth_base_url=auth_base_url,
            user_agent=user_agent,
            timeout=timeout,
        )
        self._client = APIClient(self.config, transport)

        # Accounting resources
        self.clients: ResourceAccessor[Client] = self._accounting("users/clients", Client, "client", "clients")
        self.invoices: ResourceAccessor[Invoice] = self._accounting(
            "invoices/invoices", Invoice, "invoice", "invoices"
        )
        self.payments: ResourceAccessor[Payment] = self._accounting(
            "payments/payments", Payment, "payment", "payments"
        )
        self.taxes: ResourceAccessor[Tax] = self._accounting("taxes/taxes", Tax, "tax", "taxes")

        # Business resources
        self.team_members: ResourceAccessor[TeamMember] = ResourceAccessor.for_model(
            self._client, BUSINESS_PREFIX, "team_members", TeamMember
        )

    def _accounting(
        self,
        path: str,
        model: type[DataModel],
        single_name: str,
        list_name: str,
    ) -> ResourceAccessor:
        return ResourceAccessor.for_model(
            self._client, ACCOUNTING_PREFIX, path, model, single_name=single_name, list_name=list_name
        )

    def current_user(self) -> Identity:
        """The identity details of the currently authenticated user."""
        return self._client.get(CURRENT_USER_PATH).parse(Identity.from_dict)

    def get_auth_request_uri(self, scopes: Sequence[str] | None = None) -> str:
        """
        Build the URL to send a user to for authorizing this application.

        Args:
            scopes: OAuth scopes to request

        Returns:
            Authorization URL

        Raises:
            ConfigurationError: If client_id or redirect_uri is not configured

        """
        if not self.config.redirect_uri:
            raise ConfigurationError("redirect_uri must be configured")
        if not self.config.client_id:
            raise ConfigurationError("client_id must be configured")

        params = {
            "client_id": self.config.client_id,
            "response_type": "code",
            "redirect_uri": self.config.redirect_uri,
        }
        if scopes:
            params["scope"] = " ".join(scopes)
        return f"{self.config.auth_base_url}/oauth/authorize?{urllib.parse.urlencode(params)}"
