"""Cursor-based pagination over Compute Engine listings.

Every paged call carries an explicit :class:`ListScope` (project, optional
zone, list options). When a page says more results exist, the continuation
is fetched with that same scope and the page's marker as the new cursor.
Pages are fetched lazily: the next page is requested only once every item of
the current one has been consumed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gcenode.core.exceptions import PaginationScopeError
from gcenode.observability.logger import logger

if TYPE_CHECKING:
    from gcenode.api.model import ListOptions, ListPage

log = logger.bind(component="paging")


@dataclass(frozen=True, slots=True)
class ListScope:
    """Scope an initial listing was issued with, reused for its continuations."""
    project: str | None
    zone: str | None = None
    options: ListOptions | None = None


type NextPage[T] = Callable[[str, ListScope], ListPage[T]]


class PagedIterable[T]:
    """Lazy, re-iterable chain of list pages.

    Iterating yields items; each new iteration starts over from the first
    page and re-fetches the continuations.
    """

    __slots__ = ("_first", "_scope", "_fetch_next")

    def __init__(
        self,
        first: ListPage[T],
        scope: ListScope | None = None,
        fetch_next: NextPage[T] | None = None,
    ) -> None:
        self._first = first
        self._scope = scope
        self._fetch_next = fetch_next

    @property
    def first_page(self) -> ListPage[T]:
        return self._first

    def pages(self) -> Iterator[ListPage[T]]:
        page = self._first
        yield page
        while page.next_marker is not None:
            if self._fetch_next is None or self._scope is None:
                raise PaginationScopeError(
                    "programming error: page has a continuation marker but no way to fetch it"
                )
            log.trace(
                "Fetching next page project={project} zone={zone}",
                project=self._scope.project, zone=self._scope.zone,
            )
            page = self._fetch_next(page.next_marker, self._scope)
            yield page

    def __iter__(self) -> Iterator[T]:
        for page in self.pages():
            yield from page.items

    def concat(self) -> list[T]:
        return list(self)


def advance[T](page: ListPage[T], scope: ListScope, fetch_next: NextPage[T]) -> PagedIterable[T]:
    """Turn a first page into a lazily continued iterable.

    Raises:
        PaginationScopeError: more pages exist but ``scope`` has no project.
    """
    if page.next_marker is None:
        return PagedIterable(page)

    if not scope.project:
        raise PaginationScopeError(
            "programming error: a paged listing must be issued with a project scope"
        )

    return PagedIterable(page, scope, fetch_next)
