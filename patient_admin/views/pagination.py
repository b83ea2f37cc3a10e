"""Page count and page-link layout for the patient table."""

import math
from dataclasses import dataclass

# The server rejects offsets past 1000 pages
MAX_REACHABLE_PAGES = 1000
CLAMPED_PAGES = 999

# Up to this many pages every link is shown
FULL_LINKS_THRESHOLD = 7


@dataclass(frozen=True)
class PageLink:
    """Link to one page. ``index`` is zero-based, ``label`` one-based."""

    index: int
    active: bool = False

    @property
    def label(self) -> int:
        return self.index + 1


@dataclass(frozen=True)
class PageGap:
    """Gap marker between page links."""

    key: str


PaginationItem = PageLink | PageGap


def total_pages(total: int | None, page_size: int = 10) -> int:
    """Number of pages for ``total`` results, clamped to the reachable range."""
    pages = math.ceil((total or 0) / page_size)
    if pages > MAX_REACHABLE_PAGES:
        return CLAMPED_PAGES
    return pages


def pagination_items(page: int, pages: int) -> list[PaginationItem]:
    """Page links to render around the zero-based current ``page``.

    With more than seven pages the first and last links always show, with
    up to five links around the current page and ellipses over the gaps.
    """
    if pages <= FULL_LINKS_THRESHOLD:
        return [PageLink(index=i, active=i == page) for i in range(pages)]

    items: list[PaginationItem] = [PageLink(index=0, active=page == 0)]

    if page > 4:
        items.append(PageGap(key="start-ellipsis"))

    for label in range(max(page - 2, 2), min(page + 2, pages - 1) + 1):
        items.append(PageLink(index=label - 1, active=label - 1 == page))

    if page < pages - 3:
        items.append(PageGap(key="end-ellipsis"))

    items.append(PageLink(index=pages - 1, active=page == pages - 1))
    return items


def previous_page(page: int) -> int | None:
    """Index of the previous page, None on the first page."""
    return page - 1 if page > 0 else None


def next_page(page: int, pages: int) -> int | None:
    """Index of the next page, None on the last page."""
    return page + 1 if page < pages - 1 else None
