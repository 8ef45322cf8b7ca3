"""Pagination headers: ``X-Total-Count`` plus an RFC 5988 ``Link`` header."""

from urllib.parse import urlencode

from carsonrent.models.page import Page


def pagination_headers(page: Page, base_url: str, query: str | None = None) -> dict[str, str]:
    """Build the headers describing where a page sits in its result set.

    Args:
        page: The page being returned.
        base_url: Path the links point at, e.g. "/api/cars".
        query: Search query to carry into every link, if any.

    Returns:
        Headers with the total element count and first/prev/next/last links.
    """
    last_page = max(page.total_pages - 1, 0)
    links = []
    if page.has_next:
        links.append(_link(base_url, page.page + 1, page.size, "next", query))
    if page.has_previous:
        links.append(_link(base_url, page.page - 1, page.size, "prev", query))
    links.append(_link(base_url, last_page, page.size, "last", query))
    links.append(_link(base_url, 0, page.size, "first", query))
    return {
        "X-Total-Count": str(page.total_elements),
        "Link": ",".join(links),
    }


def _link(base_url: str, page: int, size: int, rel: str, query: str | None) -> str:
    params: dict[str, str | int] = {}
    if query is not None:
        params["query"] = query
    params["page"] = page
    params["size"] = size
    return f'<{base_url}?{urlencode(params)}>; rel="{rel}"'
