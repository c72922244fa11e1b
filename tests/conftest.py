"""
pytest fixtures: an application wired to mongomock instead of a MongoDB server.
"""

from unittest.mock import patch

import mongomock
import pytest

from blog_backend.app import create_app
from blog_backend.extensions import mongo

TEST_DB = 'blog_test'
PASSWORD = 'secret123'


@pytest.fixture
def make_app(tmp_path):
    """Build an app; keyword overrides are merged into the test config."""
    patcher = patch('flask_pymongo.MongoClient', mongomock.MongoClient)
    patcher.start()

    def factory(**overrides):
        config = {
            'TESTING': True,
            'MONGO_URI': f'mongodb://localhost:27017/{TEST_DB}',
            'SECRET': 'test-signing-secret',
            'MONGO_USE_TRANSACTIONS': False,
            'ENFORCE_OWNERSHIP': True,
            'BCRYPT_LOG_ROUNDS': 4,
            'UPLOAD_FOLDER': str(tmp_path / 'images'),
            'LOG_DIR': str(tmp_path / 'logs'),
        }
        config.update(overrides)
        # mongomock clients for the same host share storage
        mongomock.MongoClient(config['MONGO_URI']).drop_database(TEST_DB)
        return create_app(config)

    yield factory

    if mongo.cx is not None:
        mongo.cx.drop_database(TEST_DB)
    patcher.stop()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return mongo.cx[TEST_DB]


def register(client, username, email, password=PASSWORD):
    return client.post('/api/auth/register', json={'username': username, 'email': email, 'password': password})


def login(client, email, password=PASSWORD):
    return client.post('/api/auth/login', json={'email': email, 'password': password})


@pytest.fixture
def signed_in(app):
    """Register a user and return ``(test_client, user_json)`` with its session cookie set."""

    def factory(username='alice', email=None):
        email = email or f'{username}@mail.com'
        user_client = app.test_client()
        assert register(user_client, username, email).status_code == 201
        response = login(user_client, email)
        assert response.status_code == 200
        return user_client, response.get_json()

    return factory


def create_post(client, user, **fields):
    body = {
        'title': 'Hello world',
        'desc': 'First post',
        'username': user['username'],
        'userId': user['_id'],
    }
    body.update(fields)
    return client.post('/api/posts/create', json=body)


def create_comment(client, user, post_id, text='Nice post'):
    return client.post('/api/comments/create', json={
        'comment': text,
        'author': user['username'],
        'postId': post_id,
        'userId': user['_id'],
    })
