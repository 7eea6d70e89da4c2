"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "STACK_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _load_secret_from_file(
    secret_name: str,
    env_var: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback
        environ: Environment to read env_var from (defaults to os.environ)

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.debug(f"Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            logger.warning(f"Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = (os.environ if environ is None else environ).get(env_var)
        if secret_value:
            logger.debug(f"Loaded {env_var} from environment")
            return secret_value

    return None


def _parse_bool(value: Union[str, bool, int, None], name: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_timeout(value: Union[str, int, float, None]) -> float:
    if value in (None, ""):
        return 0
    try:
        timeout = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"transport.timeout must be a number, got {value!r}") from exc
    if timeout < 0:
        raise ConfigurationError("transport.timeout cannot be negative")
    return int(timeout) if timeout.is_integer() else timeout


@dataclass
class SdkConfig:
    """SDK configuration container."""
    # Identity
    endpoint: str = ""
    username: str = ""
    password: str = ""
    tenant_id: Optional[str] = None
    tenant_name: Optional[str] = None

    # Transport
    transport: str = "requests"
    timeout: float = 0
    ssl_verify: Union[bool, str] = True
    debug: bool = False
    proxy: Optional[str] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)

    def transport_options(self) -> Dict[str, Any]:
        """Options handed to the transport factory."""
        options: Dict[str, Any] = {
            "timeout": self.timeout,
            "ssl_verify": self.ssl_verify,
            "debug": self.debug,
        }
        if self.proxy:
            options["proxy"] = self.proxy
        return options

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SdkConfig":
        """Build a config from flat keys (``transport.timeout``, ``tenantid``, ...).

        Unknown keys are ignored.
        """
        ssl_verify = values.get("transport.ssl_verify", True)
        if isinstance(ssl_verify, str) and ssl_verify.strip().lower() not in _TRUE_VALUES | _FALSE_VALUES:
            # CA bundle path
            verify: Union[bool, str] = ssl_verify
        else:
            verify = _parse_bool(ssl_verify, "transport.ssl_verify")

        return cls(
            endpoint=values.get("endpoint") or "",
            username=values.get("username") or "",
            password=values.get("password") or "",
            tenant_id=values.get("tenantid") or None,
            tenant_name=values.get("tenantname") or None,
            transport=values.get("transport") or "requests",
            timeout=_parse_timeout(values.get("transport.timeout")),
            ssl_verify=verify,
            debug=_parse_bool(values.get("transport.debug", False), "transport.debug"),
            proxy=values.get("transport.proxy") or None,
        )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> SdkConfig:
    """Load SDK settings from ``STACK_*`` environment variables and /run/secrets.

    Variables:
        STACK_ENDPOINT, STACK_USERNAME, STACK_PASSWORD, STACK_TENANT_ID,
        STACK_TENANT_NAME, STACK_TRANSPORT, STACK_TRANSPORT_TIMEOUT,
        STACK_TRANSPORT_SSL_VERIFY, STACK_TRANSPORT_DEBUG, STACK_TRANSPORT_PROXY
    """
    env = os.environ if environ is None else environ

    def get(name: str) -> Optional[str]:
        return env.get(ENV_PREFIX + name)

    password = _load_secret_from_file("stack_password", ENV_PREFIX + "PASSWORD", env) or ""

    values = {
        "endpoint": get("ENDPOINT"),
        "username": get("USERNAME"),
        "password": password,
        "tenantid": get("TENANT_ID"),
        "tenantname": get("TENANT_NAME"),
        "transport": get("TRANSPORT"),
        "transport.timeout": get("TRANSPORT_TIMEOUT"),
        "transport.ssl_verify": get("TRANSPORT_SSL_VERIFY") if get("TRANSPORT_SSL_VERIFY") is not None else True,
        "transport.debug": get("TRANSPORT_DEBUG") or False,
        "transport.proxy": get("TRANSPORT_PROXY"),
    }
    return SdkConfig.from_mapping(values)
