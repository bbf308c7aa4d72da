"""
Pagination helpers shared by list endpoints
"""

from sayit.errors import ValidationError

MAX_LIMIT = 100


def parse_page_args(args, default_limit=10):
    """Read page/limit from query args, clamping limit to 1..100"""
    try:
        page = int(args.get('page', 1))
        limit = int(args.get('limit', default_limit))
    except (TypeError, ValueError):
        raise ValidationError('page and limit must be integers',
                              fields={'page': 'integer', 'limit': 'integer'})

    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)
    return page, limit


def paginate(query, page, limit):
    """Run a query page and return (items, pagination meta)"""
    result = query.paginate(page=page, per_page=limit, error_out=False)
    return result.items, {
        'total': result.total,
        'page': page,
        'pages': result.pages,
        'limit': limit,
    }
