from abc import ABC, abstractmethod
from typing import Any

import httpx
from httpx._types import QueryParamTypes, RequestFiles

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.errors import BackendError


class ClientInterface(ABC):
    """Base class of every HTTP collaborator (embedding, LLM, speech-to-text, vector index).

    A client is constructed from configuration, which is validated eagerly, and
    only talks to its backend after boot(). Settings are read as
    "<TYPE>_<ENGINE>_<KEY>", e.g. RAG_QDRANT_BASE_URL.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=self._get_default_timeout())
        self._http: httpx.AsyncClient | None = None
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Reads every setting the engine declares, so a missing mandatory key fails at startup.

        Raises:
            ValueError: If a mandatory setting is missing or has the wrong type.
        """
        for setting in self._get_required_config():
            self.get_config_val(raw_key=setting.env_key, default=setting.default, val_type=setting.val_type)

    def is_booted(self) -> bool:
        return self._http is not None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def get_client_type(self) -> str:
        """
        Returns the client family in lowercase, e.g. "embed".
        """
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        pass

    def get_engine_name(self) -> str:
        """
        Returns the backend engine in lowercase, e.g. "openai".
        """
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        pass

    def _get_default_timeout(self) -> float:
        return 30.0

    ################ CONFIG ##################
    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """
        Returns the settings this engine reads, with their types and defaults.
        """
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        return f"{self.get_client_type()}_{self.get_engine_name()}_{raw_key}".upper()

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """
        Reads one engine setting.

        Args:
            raw_key (str): Key without the "<TYPE>_<ENGINE>_" prefix, e.g. "BASE_URL".
            default (Any): Value used when the variable is unset. None makes it mandatory.
            val_type (str): "string", "number", "bool" or "list".
        """
        getters = {
            "string": self._helper_config.get_string_val,
            "number": self._helper_config.get_number_val,
            "bool": self._helper_config.get_bool_val,
            "list": self._helper_config.get_list_val,
        }
        getter = getters.get(val_type)
        if getter is None:
            raise ValueError(f"Unsupported config value type '{val_type}' for '{self._get_config_key_name(raw_key)}'.")
        return getter(self._get_config_key_name(raw_key), default=default)

    ################ AUTH ##################
    @abstractmethod
    def _get_auth_header(self) -> dict:
        """
        Returns the headers that authenticate against the backend, empty when no key is configured.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_base_url(self) -> str:
        pass

    @abstractmethod
    def _get_endpoint_healthcheck(self) -> str:
        """
        Returns a cheap endpoint that answers 2xx when the backend is reachable and the credentials work.
        """
        pass

    def _build_url(self, endpoint: str) -> str:
        path = endpoint.strip().lstrip("/")
        base = self._get_base_url().rstrip("/")
        return f"{base}/{path}" if path else base

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Open the HTTP connection pool.

        Args:
            transport (httpx.AsyncBaseTransport | None): Transport override, e.g. httpx.MockTransport.
        """
        self._http = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_healthcheck(self) -> httpx.Response:
        """
        Raises:
            BackendError: If the backend is unreachable or answers with an error status.
        """
        return await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck(), raise_on_error=True)

    async def do_request(
        self,
        method: str = "GET",
        endpoint: str = "",
        json: Any = None,
        data: dict | None = None,
        files: RequestFiles | None = None,
        params: QueryParamTypes | None = None,
        raise_on_error: bool = False,
    ) -> httpx.Response:
        """Send one request to the backend with the engine's auth headers.

        Args:
            method: HTTP method.
            endpoint: Path below the base URL.
            json: JSON body.
            data: Form fields. Sent as multipart together with files when files is set.
            files: Multipart file upload.
            params: URL query parameters.
            raise_on_error: Raise BackendError on any status >= 300.

        Returns:
            httpx.Response: The raw response.

        Raises:
            RuntimeError: If boot() has not been called.
            BackendError: If the backend cannot be reached, or on an error status with raise_on_error.
        """
        if self._http is None:
            raise RuntimeError(f"{self.get_client_type().upper()} client not initialised. Call boot() before making requests.")

        url = self._build_url(endpoint)
        try:
            response = await self._http.request(
                method,
                url,
                headers=self._get_auth_header(),
                json=json,
                data=data,
                files=files,
                params=params,
            )
        except httpx.TransportError as exc:
            self.logging.error("Request to %s failed: %s", url, exc)
            raise BackendError(f"Request to {url} failed: {exc}", url=url) from exc

        if raise_on_error and response.status_code >= 300:
            self.logging.error("Request to %s failed with status %d: %s", url, response.status_code, response.text[:500])
            raise BackendError(f"Request to {url} failed with status {response.status_code}", url=url, status_code=response.status_code)
        return response
