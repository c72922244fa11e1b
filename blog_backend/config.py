import os
import logging
from dataclasses import dataclass, asdict
from urllib.parse import urlparse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = 'blog'
DEV_SECRET = 'local-dev-jwt-secret-key-for-testing'


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup and never mutated."""

    mongo_uri: str
    mongo_dbname: str = DEFAULT_DB_NAME
    secret: str = DEV_SECRET
    token_lifetime_days: int = 3
    port: int = 5000
    client_origin: str = 'http://localhost:5173'
    upload_folder: str = 'images'
    enforce_ownership: bool = True
    mongo_use_transactions: bool = True
    bcrypt_log_rounds: int = 10
    log_dir: str = 'logs'
    auth_cookie_name: str = 'token'

    @classmethod
    def from_env(cls):
        load_dotenv()

        mongo_uri = os.environ.get('MONGO_URL') or os.environ.get('MONGO_URI')
        if not mongo_uri:
            raise ValueError("MONGO_URL or MONGO_URI must be set.")

        secret = os.environ.get('SECRET') or os.environ.get('JWT_SECRET_KEY')
        if not secret:
            logger.warning('SECRET is not set. Falling back to the development signing key.')
            secret = DEV_SECRET

        return cls(
            mongo_uri=mongo_uri,
            mongo_dbname=os.environ.get('MONGO_DBNAME') or dbname_from_uri(mongo_uri),
            secret=secret,
            token_lifetime_days=int(os.environ.get('TOKEN_LIFETIME_DAYS', 3)),
            port=int(os.environ.get('PORT', 5000)),
            client_origin=os.environ.get('CLIENT_ORIGIN', 'http://localhost:5173'),
            upload_folder=os.environ.get('UPLOAD_FOLDER', 'images'),
            enforce_ownership=_env_bool('ENFORCE_OWNERSHIP', True),
            mongo_use_transactions=_env_bool('MONGO_USE_TRANSACTIONS', True),
            bcrypt_log_rounds=int(os.environ.get('BCRYPT_LOG_ROUNDS', 10)),
            log_dir=os.environ.get('LOG_DIR', 'logs'),
            auth_cookie_name=os.environ.get('AUTH_COOKIE_NAME', 'token'),
        )

    @classmethod
    def from_mapping(cls, mapping):
        """Build settings from a flat mapping of upper-case keys, as Flask config uses."""
        fields = cls.__dataclass_fields__
        kwargs = {name: mapping[name.upper()] for name in fields if name.upper() in mapping}
        if 'MONGO_URI' in mapping and 'MONGO_DBNAME' not in mapping:
            kwargs['mongo_dbname'] = dbname_from_uri(mapping['MONGO_URI'])
        return cls(**kwargs)

    def to_flask_config(self):
        return {key.upper(): value for key, value in asdict(self).items()}


def dbname_from_uri(uri):
    try:
        db_name = urlparse(uri).path.lstrip('/')
    except ValueError:
        db_name = None
    return db_name or DEFAULT_DB_NAME
