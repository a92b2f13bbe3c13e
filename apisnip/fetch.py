import logging

import httpx

from apisnip.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def is_url(location):
    return location.startswith(('http://', 'https://'))


def fetch(url, timeout=DEFAULT_TIMEOUT, client=None):
    """
    Download a remote OpenAPI document.

    Args:
        url (str): http(s) URL of the document
        timeout (float): Seconds before giving up
        client (httpx.Client, optional): Client to use instead of a fresh one

    Returns:
        tuple: (body text, content type)

    Raises:
        FetchError: The request failed or returned an error status
    """
    logger.debug("Fetching %s", url)
    try:
        if client is None:
            response = httpx.get(url, timeout=timeout, follow_redirects=True)
        else:
            response = client.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(f"Fetching {url} failed with status {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise FetchError(f"Fetching {url} failed: {e}") from e
    return response.text, response.headers.get('content-type', '')
