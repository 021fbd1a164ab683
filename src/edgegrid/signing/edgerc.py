"""
Credential loading for EdgeGrid signing

Credentials come from an ``.edgerc`` INI file or from ``AKAMAI_*``
environment variables.
"""

import configparser
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from ..exceptions import ConfigurationError
from .types import DEFAULT_MAX_BODY_SIZE

logger = logging.getLogger(__name__)

DEFAULT_EDGERC_PATH = "~/.edgerc"
DEFAULT_SECTION = "default"

REQUIRED_KEYS = ("client_token", "client_secret", "access_token", "host")


@dataclass
class EdgeRcCredentials:
    """
    Credentials for one ``.edgerc`` section

    Attributes:
        client_token: Client token issued with the API client
        client_secret: Secret used to derive signing keys
        access_token: Access token issued with the API client
        host: API hostname, without scheme
        max_body: Maximum body size covered by the content hash
    """
    client_token: str
    client_secret: str
    access_token: str
    host: str
    max_body: int = DEFAULT_MAX_BODY_SIZE

    def __post_init__(self):
        """Validate credentials"""
        for key in REQUIRED_KEYS:
            if not getattr(self, key):
                raise ConfigurationError(
                    f"Credential '{key}' cannot be empty",
                    details={"key": key}
                )

        if self.max_body <= 0:
            raise ConfigurationError("max_body must be positive")

        # .edgerc hosts are bare hostnames; tolerate a copied base URL
        for prefix in ("https://", "http://"):
            if self.host.startswith(prefix):
                self.host = self.host[len(prefix):]
        self.host = self.host.rstrip('/')

    @property
    def base_uri(self) -> str:
        """Base URI for requests made with these credentials"""
        return f"https://{self.host}"


def _parse_max_body(value: Optional[str], source: str) -> int:
    if value is None or value == '':
        return DEFAULT_MAX_BODY_SIZE
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(
            f"Invalid max body size in {source}: {value}",
            details={"max_body": value}
        )


def load_edgerc(
    path: Optional[Union[str, Path]] = None,
    section: str = DEFAULT_SECTION
) -> EdgeRcCredentials:
    """
    Load credentials from an ``.edgerc`` file.

    Args:
        path: Path to the file (defaults to ``~/.edgerc``)
        section: Section to read

    Returns:
        EdgeRcCredentials: Validated credentials

    Raises:
        ConfigurationError: If the file, the section or a key is missing
    """
    edgerc_path = Path(os.path.expanduser(str(path or DEFAULT_EDGERC_PATH)))

    if not edgerc_path.is_file():
        raise ConfigurationError(
            f"EdgeRc file not found: {edgerc_path}",
            "EDGERC_NOT_FOUND",
            {"path": str(edgerc_path)}
        )

    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read(edgerc_path, encoding="utf-8")
    except configparser.Error as e:
        raise ConfigurationError(
            f"Unable to parse EdgeRc file {edgerc_path}: {e}",
            "EDGERC_INVALID",
            {"path": str(edgerc_path)}
        )

    if not parser.has_section(section):
        raise ConfigurationError(
            f"Section '{section}' does not exist in {edgerc_path}",
            "EDGERC_SECTION_NOT_FOUND",
            {"path": str(edgerc_path), "section": section}
        )

    values = parser[section]
    missing = [key for key in REQUIRED_KEYS if not values.get(key)]
    if missing:
        raise ConfigurationError(
            f"Section '{section}' is missing: {', '.join(missing)}",
            "EDGERC_INCOMPLETE",
            {"path": str(edgerc_path), "section": section, "missing": missing}
        )

    max_body = values.get("max-body", values.get("max_body"))

    logger.debug(f"Loaded EdgeGrid credentials from {edgerc_path} [{section}]")

    return EdgeRcCredentials(
        client_token=values["client_token"],
        client_secret=values["client_secret"],
        access_token=values["access_token"],
        host=values["host"],
        max_body=_parse_max_body(max_body, str(edgerc_path)),
    )


def env_prefix(section: str = DEFAULT_SECTION) -> str:
    """Environment variable prefix for a section (``AKAMAI_`` or ``AKAMAI_<SECTION>_``)."""
    if section == DEFAULT_SECTION:
        return "AKAMAI_"
    return f"AKAMAI_{section.upper()}_"


def load_from_env(
    section: str = DEFAULT_SECTION,
    environ: Optional[Mapping[str, str]] = None
) -> EdgeRcCredentials:
    """
    Load credentials from ``AKAMAI_*`` environment variables.

    Args:
        section: Section name used to build the variable prefix
        environ: Mapping to read instead of ``os.environ``

    Returns:
        EdgeRcCredentials: Validated credentials

    Raises:
        ConfigurationError: If a required variable is not set
    """
    environ = os.environ if environ is None else environ
    prefix = env_prefix(section)

    values = {key: environ.get(f"{prefix}{key.upper()}") for key in REQUIRED_KEYS}
    missing = [f"{prefix}{key.upper()}" for key, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Environment variables not set: {', '.join(missing)}",
            "ENV_INCOMPLETE",
            {"section": section, "missing": missing}
        )

    return EdgeRcCredentials(
        max_body=_parse_max_body(environ.get(f"{prefix}MAX_BODY"), "environment"),
        **values
    )
