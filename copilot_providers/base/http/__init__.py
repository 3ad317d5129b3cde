"""HTTP utilities package.

Exposes pooled httpx clients and the fixed request headers shared by the
token endpoints.
"""

from .client import get_httpx_client, close_all_clients
from .headers import completion_headers, editor_headers, json_headers

__all__ = ["get_httpx_client", "close_all_clients", "json_headers", "editor_headers", "completion_headers"]
