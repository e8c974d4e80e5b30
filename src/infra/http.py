import httpx

from src.config import get_settings


class _HttpHolder:
    client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    if _HttpHolder.client is None:
        settings = get_settings()
        _HttpHolder.client = httpx.AsyncClient(timeout=settings.api_timeout)
    return _HttpHolder.client


async def close_http_client() -> None:
    if _HttpHolder.client is not None:
        await _HttpHolder.client.aclose()
        _HttpHolder.client = None


def set_http_client(client: httpx.AsyncClient | None) -> None:
    _HttpHolder.client = client
