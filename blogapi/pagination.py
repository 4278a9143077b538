# Pagination helpers
import math
from dataclasses import dataclass

from flask import current_app, request


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def offset(self):
        return (self.page - 1) * self.limit


def _positive_int(value, default, ceiling):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number <= 0:
        return default
    return min(number, ceiling)


def parse_pagination(args=None):
    """Read ``page`` and ``limit`` from the query string, falling back to the defaults.

    Both values are clamped to configured ceilings so the offset stays within
    the range the store accepts.
    """
    if args is None:
        args = request.args
    config = current_app.config
    return PageRequest(
        page=_positive_int(args.get('page'), config.get('DEFAULT_PAGE', 1),
                           config.get('MAX_PAGE', 100000)),
        limit=_positive_int(args.get('limit'), config.get('DEFAULT_PAGE_SIZE', 10),
                            config.get('MAX_PAGE_SIZE', 100)))


def pagination_meta(page_request, total, total_key):
    total_pages = math.ceil(total / page_request.limit)
    return {
        'currentPage': page_request.page,
        'totalPages': total_pages,
        total_key: total,
        'hasNextPage': page_request.page < total_pages,
        'hasPrevPage': page_request.page > 1
    }
