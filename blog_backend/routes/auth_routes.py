from flask import Blueprint, request, jsonify, current_app
from pymongo.errors import PyMongoError

from blog_backend.auth import get_token_service, read_session_token
from blog_backend.errors import (
    DuplicateEntity,
    InvalidCredentials,
    NotFound,
    Unauthenticated,
    translate_store_error,
)
from blog_backend.extensions import bcrypt, get_mongo_db
from blog_backend.mongo_models import User
from blog_backend.stores import UserStore
from blog_backend.validation import LoginRequest, RegisterRequest, password_fits, validate_body

auth_bp = Blueprint('auth_api', __name__)


def hash_password(password):
    return bcrypt.generate_password_hash(password).decode('utf-8')


def session_claims(user):
    return {'id': str(user._id), 'username': user.username, 'email': user.email}


def cookie_attributes():
    """Attributes shared by the session cookie and the cookie that clears it."""
    return {
        'httponly': True,
        'secure': current_app.config.get('SESSION_COOKIE_SECURE', False),
        'samesite': current_app.config.get('SESSION_COOKIE_SAMESITE', 'Lax'),
    }


# --- Registration ---

@auth_bp.route('/register', methods=['POST'])
def register():
    data = validate_body(RegisterRequest, request.get_json(silent=True))
    users = UserStore(get_mongo_db())

    try:
        if users.find_conflict(username=data.username, email=data.email):
            current_app.logger.warning("Registration failed: username or email already registered")
            raise DuplicateEntity()

        new_user = User(username=data.username, email=data.email, password=hash_password(data.password))
        users.insert(new_user)
    except PyMongoError as e:
        current_app.logger.error(f"Error registering user: {e}", exc_info=True)
        raise translate_store_error(e, 'Registration') from e

    current_app.logger.info(f"New user registered: {data.email}")
    return jsonify(new_user.to_json()), 201


# --- Login / logout ---

@auth_bp.route('/login', methods=['POST'])
def login():
    data = validate_body(LoginRequest, request.get_json(silent=True))

    try:
        user = UserStore(get_mongo_db()).find_by_email(data.email)
    except PyMongoError as e:
        current_app.logger.error(f"Error logging in user: {e}", exc_info=True)
        raise translate_store_error(e, 'Login') from e

    if not user:
        current_app.logger.warning(f"Login failed: user not found with email {data.email}")
        raise NotFound('User not found!')

    if not password_fits(data.password) or not bcrypt.check_password_hash(user.password, data.password):
        current_app.logger.warning(f"Login failed: incorrect password for email {data.email}")
        raise InvalidCredentials()

    token = get_token_service().issue(session_claims(user))

    response = jsonify(user.to_json())
    response.set_cookie(
        current_app.config['AUTH_COOKIE_NAME'],
        token,
        max_age=int(get_token_service().lifetime.total_seconds()),
        **cookie_attributes()
    )
    current_app.logger.info(f"User logged in successfully: {data.email}")
    return response, 200


@auth_bp.route('/logout', methods=['GET'])
def logout():
    response = jsonify({'message': 'User logged out successfully!'})
    response.delete_cookie(current_app.config['AUTH_COOKIE_NAME'], **cookie_attributes())
    current_app.logger.info("User logged out successfully")
    return response, 200


# --- Session refetch ---

@auth_bp.route('/refetch', methods=['GET'])
def refetch():
    try:
        claims = get_token_service().verify(read_session_token())
    except Unauthenticated as e:
        current_app.logger.warning(f"Token verification failed: {e.message}")
        raise NotFound(e.message) from e

    current_app.logger.info("User refetched successfully")
    return jsonify(claims), 200
