import datetime

import jwt

from blog_backend.errors import TokenInvalid, TokenExpired

ALGORITHM = 'HS256'
IDENTITY_CLAIMS = ('id', 'username', 'email')


class TokenService:
    """Issues and verifies signed session tokens.

    Whoever holds ``secret`` can both forge and verify tokens; there is no
    per-user key and no revocation list.
    """

    def __init__(self, secret, lifetime=datetime.timedelta(days=3), algorithm=ALGORITHM):
        if not secret:
            raise ValueError("A signing secret is required.")
        self._secret = secret
        self.lifetime = lifetime
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings):
        return cls(settings.secret, datetime.timedelta(days=settings.token_lifetime_days))

    def issue(self, claims, now=None):
        now = now or datetime.datetime.now(datetime.timezone.utc)
        payload = {key: claims[key] for key in IDENTITY_CLAIMS}
        payload['iat'] = now
        payload['exp'] = now + self.lifetime
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token, now=None):
        if not token or not isinstance(token, str):
            raise TokenInvalid()

        options = {'require': ['exp']}
        try:
            if now is None:
                claims = jwt.decode(token, self._secret, algorithms=[self.algorithm], options=options)
            else:
                # exp is checked by hand against the supplied clock
                claims = jwt.decode(
                    token, self._secret, algorithms=[self.algorithm],
                    options={**options, 'verify_exp': False, 'verify_iat': False},
                )
                if claims['exp'] <= now.timestamp():
                    raise TokenExpired()
        except jwt.ExpiredSignatureError:
            raise TokenExpired()
        except jwt.InvalidTokenError:
            raise TokenInvalid()

        if not claims.get('id'):
            raise TokenInvalid()
        return claims
