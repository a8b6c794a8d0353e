"""Server configuration read from an XML file."""

from __future__ import annotations

import functools
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, fields
from typing import Any

__all__ = ["Config", "parse_config", "load_config", "get_config"]


@dataclass(frozen=True)
class Config:
    """Resolved server settings."""

    username: str = ""
    password: str = field(default_factory=str)
    database_address: str = ""
    database_name: str = ""

    default_address: str = ""
    gamespy_address: str = ""
    nas_address: str = ""
    nas_port: str = ""
    nas_address_https: str = ""
    nas_port_https: str = ""

    frontend_address: str = "127.0.0.1:29998"
    frontend_backend_address: str = "127.0.0.1:29999"
    backend_address: str = "127.0.0.1:29999"
    backend_frontend_address: str = "127.0.0.1:29998"

    enable_https: bool = False
    enable_https_exploit_wii: bool = True
    enable_https_exploit_ds: bool = True

    log_level: int = 4
    log_output: str = "StdOutAndFile"

    cert_path: str = ""
    key_path: str = ""
    cert_path_wii: str = ""
    key_path_wii: str = ""
    cert_path_ds: str = ""
    wii_cert_path_ds: str = ""
    key_path_ds: str = ""

    friend_bot_pid: str = ""
    api_secret: str = field(default_factory=str)

    allow_default_dolphin_keys: bool = True
    allow_multiple_device_ids: str = "never"
    allow_connect_without_device_id: bool = False

    allow_multiple_csnums: str = ""

    enable_hash_check: bool = False

    server_name: str = "WiiLink"


_STR, _BOOL, _INT = "str", "bool", "int"

# XML tag and value kind of each Config field, in field order.
_TAGS = (
    ("username", _STR),
    ("password", _STR),
    ("databaseAddress", _STR),
    ("databaseName", _STR),
    ("address", _STR),
    ("gsAddress", _STR),
    ("nasAddress", _STR),
    ("nasPort", _STR),
    ("nasAddressHttps", _STR),
    ("nasPortHttps", _STR),
    ("frontendAddress", _STR),
    ("frontendBackendAddress", _STR),
    ("backendAddress", _STR),
    ("backendFrontendAddress", _STR),
    ("enableHttps", _BOOL),
    ("enableHttpsExploitWii", _BOOL),
    ("enableHttpsExploitDS", _BOOL),
    ("logLevel", _INT),
    ("logOutput", _STR),
    ("certPath", _STR),
    ("keyPath", _STR),
    ("certDerPathWii", _STR),
    ("keyPathWii", _STR),
    ("certDerPathDS", _STR),
    ("wiiCertDerPathDS", _STR),
    ("keyPathDS", _STR),
    ("friendBotPID", _STR),
    ("apiSecret", _STR),
    ("allowDefaultDolphinKeys", _BOOL),
    ("allowMultipleDeviceIDs", _STR),
    ("allowConnectWithoutDeviceID", _BOOL),
    ("allowMultipleCsnums", _STR),
    ("enableHashCheck", _BOOL),
    ("serverName", _STR),
)

_FIELDS_BY_TAG = {
    tag: (config_field.name, kind)
    for (tag, kind), config_field in zip(_TAGS, fields(Config), strict=True)
}

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_text(element: ET.Element) -> str:
    return "".join([element.text or ""] + [child.tail or "" for child in element])


def _convert(text: str, kind: str, tag: str) -> Any:
    if kind == _STR:
        return text
    if not text:
        return False if kind == _BOOL else 0
    stripped = text.strip()
    if kind == _BOOL:
        if stripped in _TRUE:
            return True
        if stripped in _FALSE:
            return False
        raise ValueError(f"invalid boolean for <{tag}>: {stripped!r}")
    try:
        return int(stripped, 10)
    except ValueError:
        raise ValueError(f"invalid integer for <{tag}>: {stripped!r}") from None


def parse_config(text: str | bytes) -> Config:
    """Parse configuration XML and fill in the defaults."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"invalid config XML: {exc}") from exc

    raw: dict[str, Any] = {}
    for child in root:
        if not isinstance(child.tag, str):
            continue
        tag = _local_name(child.tag)
        spec = _FIELDS_BY_TAG.get(tag)
        if spec is None:
            continue
        name, kind = spec
        raw[name] = _convert(_element_text(child), kind, tag)

    values = {
        "allow_default_dolphin_keys": True,
        "allow_multiple_device_ids": "never",
        "allow_connect_without_device_id": False,
        "server_name": "WiiLink",
    }
    values.update(raw)

    default_address = values.get("default_address", "")
    if values.get("gamespy_address") is None:
        values["gamespy_address"] = default_address
    if values.get("nas_address") is None:
        values["nas_address"] = default_address
    if values.get("nas_address_https") is None:
        values["nas_address_https"] = values["nas_address"]
    if values.get("enable_https_exploit_wii") is None:
        values["enable_https_exploit_wii"] = True
    if values.get("enable_https_exploit_ds") is None:
        values["enable_https_exploit_ds"] = True
    if values.get("log_level") is None:
        values["log_level"] = 4
    if not values.get("log_output"):
        values["log_output"] = "StdOutAndFile"
    if not values.get("frontend_address"):
        values["frontend_address"] = "127.0.0.1:29998"
    if not values.get("backend_address"):
        values["backend_address"] = "127.0.0.1:29999"
    if not values.get("frontend_backend_address"):
        values["frontend_backend_address"] = values["backend_address"]
    if not values.get("backend_frontend_address"):
        values["backend_frontend_address"] = values["frontend_address"]

    device_ids = values["allow_multiple_device_ids"]
    if device_ids in ("true", "yes"):
        values["allow_multiple_device_ids"] = "always"
    elif device_ids != "SameIPAddress":
        values["allow_multiple_device_ids"] = "never"

    return Config(**values)


def load_config(path: str | os.PathLike = "config.xml") -> Config:
    """Read and parse a configuration file."""
    with open(path, "rb") as handle:
        return parse_config(handle.read())


@functools.lru_cache(maxsize=None)
def _cached_config(path: str) -> Config:
    return load_config(path)


def get_config(path: str | os.PathLike = "config.xml") -> Config:
    """Return the configuration, reading the file only on first use."""
    return _cached_config(os.fspath(path))