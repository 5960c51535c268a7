import os
import ssl
from typing import Any, Optional

from .constants import (
    DEFAULT_TIMEOUT,
    ENV_DISABLE_SSL_VERIFY,
    ENV_REQUESTS_CA_BUNDLE,
    ENV_SSL_CERT_DIR,
    ENV_SSL_CERT_FILE,
    ENV_TIMEOUT,
)


def _env_path(name: str) -> Optional[str]:
    value = os.environ.get(name)
    if not value:
        return None
    return os.path.expanduser(os.path.expandvars(value))


def create_ssl_context() -> ssl.SSLContext:
    """TLS context for transports built from the environment.

    An explicit CA bundle (``SSL_CERT_FILE``, ``REQUESTS_CA_BUNDLE``) or
    directory (``SSL_CERT_DIR``) always wins. Otherwise the system trust store
    is used through truststore when installed, falling back to certifi.
    """
    cafile = _env_path(ENV_SSL_CERT_FILE) or _env_path(ENV_REQUESTS_CA_BUNDLE)
    capath = _env_path(ENV_SSL_CERT_DIR)
    if cafile or capath:
        return ssl.create_default_context(cafile=cafile, capath=capath)

    try:
        import truststore

        return truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    except ImportError:
        import certifi

        return ssl.create_default_context(cafile=certifi.where())


def _timeout_from_env() -> float:
    raw = os.environ.get(ENV_TIMEOUT)
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT


def get_httpx_client_kwargs() -> dict[str, Any]:
    """Keyword arguments for an ``httpx.AsyncClient`` used as a transport.

    Redirects, proxies from the environment and TLS verification are left to
    httpx; only the knobs below are read from the environment.
    """
    disable_verify = os.environ.get(ENV_DISABLE_SSL_VERIFY, "").lower() in (
        "1",
        "true",
        "yes",
    )
    return {
        "verify": False if disable_verify else create_ssl_context(),
        "timeout": _timeout_from_env(),
        "follow_redirects": True,
    }
