"""Pagination links for collection documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence
from urllib.parse import quote_plus

from linkweave.core.entity import EntityInstance
from linkweave.core.errors import InvalidPageError


@dataclass(frozen=True)
class CursorPage:
    """A page of a cursor-paginated collection.

    The cursor is opaque; it is forwarded into links without being
    interpreted.
    """

    items: Sequence[EntityInstance]
    cursor: str | None = None
    has_next: bool = False
    has_prev: bool = False


@dataclass(frozen=True)
class OffsetPage:
    """A page of an offset-paginated collection."""

    items: Sequence[EntityInstance]
    offset: int = 0
    limit: int = 20
    total: int | None = None


@dataclass(frozen=True)
class PageLinks:
    """Navigation links of one collection page."""

    self: str
    first: str
    next: str | None = None
    prev: str | None = None
    last: str | None = None

    def to_dict(self) -> dict[str, str]:
        """Return the links that are present, in canonical order."""
        links = {"self": self.self, "first": self.first}
        if self.prev is not None:
            links["prev"] = self.prev
        if self.next is not None:
            links["next"] = self.next
        if self.last is not None:
            links["last"] = self.last
        return links


def with_query(base_url: str, params: dict[str, Any]) -> str:
    """Append query parameters to a URL, keeping any existing query string."""
    if not params:
        return base_url
    query = "&".join(f"{k}={quote_plus(str(v))}" for k, v in params.items())
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{query}"


class PaginationAdapter:
    """
    Computes first/prev/next/last links for collection pages.

    Query parameter names are configurable; the defaults follow the
    JSON:API ``page[...]`` family.
    """

    def __init__(
        self,
        cursor_param: str = "page[cursor]",
        after_param: str = "page[after]",
        before_param: str = "page[before]",
        last_param: str = "page[last]",
        offset_param: str = "page[offset]",
        limit_param: str = "page[limit]",
    ) -> None:
        self.cursor_param = cursor_param
        self.after_param = after_param
        self.before_param = before_param
        self.last_param = last_param
        self.offset_param = offset_param
        self.limit_param = limit_param

    def paginate(self, page: CursorPage | OffsetPage, base_url: str) -> PageLinks:
        """Build links for a page, raising InvalidPageError on contradictory input."""
        if isinstance(page, OffsetPage):
            return self._paginate_offset(page, base_url)
        return self._paginate_cursor(page, base_url)

    def _paginate_cursor(self, page: CursorPage, base_url: str) -> PageLinks:
        if not page.items and page.has_next:
            raise InvalidPageError("Page has no items but claims a next page")

        cursor = "" if page.cursor is None else page.cursor

        self_href = with_query(base_url, {self.cursor_param: cursor} if cursor else {})
        return PageLinks(
            self=self_href,
            first=base_url,
            next=with_query(base_url, {self.after_param: cursor}) if page.has_next else None,
            prev=with_query(base_url, {self.before_param: cursor}) if page.has_prev else None,
            last=with_query(base_url, {self.last_param: "true"}) if page.has_next else self_href,
        )

    def _paginate_offset(self, page: OffsetPage, base_url: str) -> PageLinks:
        if page.offset < 0:
            raise InvalidPageError(f"Negative page offset: {page.offset}")
        if page.limit <= 0:
            raise InvalidPageError(f"Page limit must be positive: {page.limit}")
        if page.total is not None:
            if page.total < 0:
                raise InvalidPageError(f"Negative collection total: {page.total}")
            if page.items and page.offset >= page.total:
                raise InvalidPageError("Page has items beyond the collection total")

        def link(offset: int) -> str:
            return with_query(base_url, {self.offset_param: offset, self.limit_param: page.limit})

        if page.total is not None:
            has_next = page.offset + page.limit < page.total
            last_offset = max(page.total - 1, 0) // page.limit * page.limit
        else:
            # Without a total a full page is taken to mean more may follow.
            has_next = len(page.items) >= page.limit
            last_offset = None if has_next else page.offset

        if not page.items and has_next:
            raise InvalidPageError("Page has no items but claims a next page")

        return PageLinks(
            self=link(page.offset),
            first=link(0),
            next=link(page.offset + page.limit) if has_next else None,
            prev=link(max(page.offset - page.limit, 0)) if page.offset > 0 else None,
            last=link(last_offset) if last_offset is not None else None,
        )


def paginate(page: CursorPage | OffsetPage, base_url: str) -> PageLinks:
    """Build page links with the default query parameter names."""
    return PaginationAdapter().paginate(page, base_url)
