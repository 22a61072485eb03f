"""
Admin credential check for manifest commits.
"""

import hmac
import re

from flask import Request

BEARER_PATTERN = re.compile(r'^Bearer\s+', re.IGNORECASE)


def admin_ok(request: Request, token: str) -> bool:
    """
    True when the request carries the admin token, either as
    ``Authorization: Bearer <token>`` or as ``?token=<token>``.

    An empty configured token authenticates nobody.
    """
    if not token:
        return False
    bearer = BEARER_PATTERN.sub('', request.headers.get('Authorization', '')).strip()
    query = request.args.get('token', '')
    return (hmac.compare_digest(bearer.encode(), token.encode())
            or hmac.compare_digest(query.encode(), token.encode()))
