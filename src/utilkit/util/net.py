from __future__ import annotations

import logging
from urllib.parse import quote

import requests
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

logger = logging.getLogger(__name__)


class ProxyConfig(BaseModel):
    """HTTP proxy settings handed to a ``requests.Session``.

    Credentials are optional; when ``username`` is set they are embedded in
    the proxy URL so requests sends them as proxy basic auth.
    """

    model_config = ConfigDict(extra="forbid")

    host: str
    port: int = Field(ge=1, le=65535)
    username: str | None = None
    password: SecretStr | None = None

    @field_validator("host")
    @classmethod
    def validate_host(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("proxy.host must not be empty")
        return normalized

    @field_validator("port", mode="before")
    @classmethod
    def validate_port(cls, value: object) -> object:
        if isinstance(value, str):
            return int(value.strip())
        return value

    @property
    def url(self) -> str:
        credentials = ""
        if self.username:
            credentials = quote(self.username, safe="")
            if self.password is not None:
                credentials += ":" + quote(self.password.get_secret_value(), safe="")
            credentials += "@"
        return f"http://{credentials}{self.host}:{self.port}"

    def as_proxies(self) -> dict[str, str]:
        return {"http": self.url, "https": self.url}


def build_session(
    proxy: ProxyConfig | None = None,
    session: requests.Session | None = None,
) -> requests.Session:
    """Return ``session`` (or a new one) routed through ``proxy`` if given."""
    session = session or requests.Session()
    if proxy is None:
        return session

    session.proxies.update(proxy.as_proxies())
    # proxies are explicit; HTTP(S)_PROXY env vars must not override them
    session.trust_env = False
    logger.info("http proxy enabled host=%s port=%d auth=%s", proxy.host, proxy.port, bool(proxy.username))
    return session
