from rbac_admin.utils.errors import ValidationError

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def normalize_pagination(limit_raw, offset_raw):
    try:
        limit = int(limit_raw) if limit_raw is not None else DEFAULT_LIMIT
        offset = int(offset_raw) if offset_raw is not None else 0
    except ValueError:
        raise ValidationError('limit/offset must be int')
    limit = max(1, min(limit, MAX_LIMIT))
    offset = max(0, offset)
    return limit, offset


def paginate(query, args):
    """Apply ?limit=&offset= to a SQLAlchemy query; returns (rows, pagination meta)."""
    limit, offset = normalize_pagination(args.get('limit'), args.get('offset'))
    total = query.count()
    rows = query.offset(offset).limit(limit).all()
    return rows, {
        'total': total,
        'limit': limit,
        'offset': offset,
        'returned': len(rows),
    }
