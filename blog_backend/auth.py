# blog_backend/auth.py
from functools import wraps

from flask import current_app, g, request

from blog_backend.errors import Forbidden, Unauthenticated


def get_token_service():
    return current_app.extensions['token_service']


def read_session_token():
    return request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])


# Admits the request only with a valid session token cookie.
def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = read_session_token()
        if not token:
            current_app.logger.warning(f"Rejected {request.method} {request.path}: no session token")
            raise Unauthenticated()

        try:
            claims = get_token_service().verify(token)
        except Unauthenticated as e:
            current_app.logger.warning(f"Rejected {request.method} {request.path}: {e.message}")
            raise

        g.claims = claims
        g.user_id = claims['id']
        g.username = claims.get('username')
        g.email = claims.get('email')
        return f(*args, **kwargs)
    return decorated


def ownership_enforced():
    return current_app.config.get('ENFORCE_OWNERSHIP', True)


def require_owner(owner_id, resource='resource'):
    """Reject the request unless the signed-in user owns ``owner_id``.

    Does nothing when the ownership policy is switched off.
    """
    if not ownership_enforced():
        return
    if str(owner_id) != str(g.user_id):
        current_app.logger.warning(f"User {g.user_id} tried to modify {resource} owned by {owner_id}")
        raise Forbidden()
