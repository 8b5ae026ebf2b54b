"""URL construction for the remote query endpoint."""

from urllib.parse import quote

from tableedit.config import get_settings
from tableedit.schemas.server import ServerSpec

settings = get_settings()


def _normalize(path: str) -> str:
    """Return ``path`` with one leading and one trailing slash, or ``/``."""
    stripped = (path or "").strip("/")
    return f"/{stripped}/" if stripped else "/"


def build_base_url(spec: ServerSpec) -> str:
    """
    Build the API root URL for a server.

    ``path_prefix`` is the web-server prefix of the instance (``/iris``); the
    API path from settings is appended to it. Port 443 always uses https.

    Example:
        ``http://localhost:52773/api/atelier/``
    """
    scheme = "https" if spec.port == 443 else spec.scheme
    prefix = _normalize(spec.path_prefix).rstrip("/")
    api_path = _normalize(settings.DEFAULT_PATH_PREFIX)
    return f"{scheme}://{spec.host}:{spec.port}{prefix}{api_path}"


def encode_namespace(namespace: str) -> str:
    """Percent-encode a namespace for use as a path segment (``%SYS`` -> ``%25SYS``)."""
    return quote(namespace, safe="")


def build_query_url(base_url: str, namespace: str) -> str:
    """Build the query action URL for a namespace."""
    return f"{base_url}v1/{encode_namespace(namespace)}/action/query"
