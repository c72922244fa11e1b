from flask import Blueprint, request, jsonify, current_app
from pymongo.errors import PyMongoError

from blog_backend.auth import token_required, require_owner
from blog_backend.errors import DuplicateEntity, NotFound, ValidationError, translate_store_error
from blog_backend.extensions import get_mongo_db
from blog_backend.routes.auth_routes import hash_password
from blog_backend.routes.post_routes import get_cascade
from blog_backend.stores import UserStore
from blog_backend.validation import UserUpdate, parse_object_id, validate_body

user_bp = Blueprint('user_api', __name__)


@user_bp.route('/<string:user_id>', methods=['PUT'])
@token_required
def update_user(user_id):
    object_id = parse_object_id(user_id, 'user ID')
    require_owner(user_id, 'user')

    changes = validate_body(UserUpdate, request.get_json(silent=True)).changes()
    if not changes:
        raise ValidationError([{'field': 'body', 'message': 'No updatable fields supplied'}])
    if 'password' in changes:
        changes['password'] = hash_password(changes['password'])

    users = UserStore(get_mongo_db())
    try:
        if users.find_conflict(changes.get('username'), changes.get('email'), exclude_id=object_id):
            raise DuplicateEntity()
        updated_user = users.update(object_id, changes)
    except PyMongoError as e:
        current_app.logger.error(f"Error updating user {user_id}: {e}", exc_info=True)
        raise translate_store_error(e, 'User update') from e

    if not updated_user:
        raise NotFound('User not found')

    current_app.logger.info(f"User updated: {user_id} (fields: {', '.join(sorted(changes))})")
    return jsonify(updated_user.to_json()), 200


@user_bp.route('/<string:user_id>', methods=['DELETE'])
@token_required
def delete_user(user_id):
    object_id = parse_object_id(user_id, 'user ID')
    require_owner(user_id, 'user')

    removed = get_cascade().delete_user(object_id)
    current_app.logger.info(
        f"User deleted: {user_id} (posts removed: {removed['posts']}, comments removed: {removed['comments']})"
    )
    return jsonify({'message': 'User has been deleted!', 'deleted': removed}), 200


@user_bp.route('/<string:user_id>', methods=['GET'])
def get_user(user_id):
    object_id = parse_object_id(user_id, 'user ID')
    try:
        user = UserStore(get_mongo_db()).find_by_id(object_id)
    except PyMongoError as e:
        current_app.logger.error(f"Error retrieving user {user_id}: {e}", exc_info=True)
        raise translate_store_error(e, 'User retrieval') from e

    if not user:
        raise NotFound('User not found')
    return jsonify(user.to_json()), 200
