from flask import Blueprint, request, jsonify, current_app
from pymongo.errors import PyMongoError

from blog_backend.auth import token_required, require_owner
from blog_backend.errors import NotFound, ValidationError, translate_store_error
from blog_backend.extensions import get_mongo_db
from blog_backend.mongo_models import Comment
from blog_backend.stores import CommentStore, PostStore, UserStore
from blog_backend.validation import CommentCreate, CommentUpdate, parse_object_id, validate_body

comment_bp = Blueprint('comment_api', __name__)


def load_comment(comments, comment_id):
    comment = comments.find_by_id(comment_id)
    if not comment:
        raise NotFound('Comment not found')
    return comment


@comment_bp.route('/create', methods=['POST'])
@token_required
def create_comment():
    data = validate_body(CommentCreate, request.get_json(silent=True))
    require_owner(data.userId, 'comment')

    db_mongo = get_mongo_db()
    try:
        # existence is checked before the insert, not atomically with it
        if not PostStore(db_mongo).find_by_id(parse_object_id(data.postId, 'postId')):
            raise NotFound('Post not found')
        if not UserStore(db_mongo).find_by_id(parse_object_id(data.userId, 'userId')):
            raise NotFound('User not found')

        new_comment = Comment(**data.changes())
        CommentStore(db_mongo).insert(new_comment)
    except PyMongoError as e:
        current_app.logger.error(f"Error creating comment: {e}", exc_info=True)
        raise translate_store_error(e, 'Comment creation') from e

    current_app.logger.info(f"Comment created successfully: {new_comment._id}")
    return jsonify(new_comment.to_json()), 200


@comment_bp.route('/<string:comment_id>', methods=['PUT'])
@token_required
def update_comment(comment_id):
    object_id = parse_object_id(comment_id, 'comment ID')
    changes = validate_body(CommentUpdate, request.get_json(silent=True)).changes()
    if not changes:
        raise ValidationError([{'field': 'comment', 'message': 'Comment cannot be empty'}])

    comments = CommentStore(get_mongo_db())
    try:
        require_owner(load_comment(comments, object_id).userId, 'comment')
        updated_comment = comments.update(object_id, changes)
    except PyMongoError as e:
        current_app.logger.error(f"Error updating comment: {e}", exc_info=True)
        raise translate_store_error(e, 'Comment update') from e

    if not updated_comment:
        raise NotFound('Comment not found')

    current_app.logger.info(f"Comment updated successfully: {comment_id}")
    return jsonify(updated_comment.to_json()), 200


@comment_bp.route('/<string:comment_id>', methods=['DELETE'])
@token_required
def delete_comment(comment_id):
    object_id = parse_object_id(comment_id, 'comment ID')

    comments = CommentStore(get_mongo_db())
    try:
        require_owner(load_comment(comments, object_id).userId, 'comment')
        deleted = comments.delete(object_id)
    except PyMongoError as e:
        current_app.logger.error(f"Error deleting comment: {e}", exc_info=True)
        raise translate_store_error(e, 'Comment deletion') from e

    if not deleted:
        raise NotFound('Comment not found')

    current_app.logger.info(f"Comment deleted successfully: {comment_id}")
    return jsonify({'message': 'Comment has been deleted!'}), 200


@comment_bp.route('/post/<string:post_id>', methods=['GET'])
def get_post_comments(post_id):
    parse_object_id(post_id, 'post ID')
    try:
        comments = CommentStore(get_mongo_db()).find_by_post(post_id)
    except PyMongoError as e:
        current_app.logger.error(f"Error fetching comments: {e}", exc_info=True)
        raise translate_store_error(e, 'Comment retrieval') from e

    current_app.logger.info(f"Fetched comments for post ID: {post_id}")
    return jsonify([comment.to_json() for comment in comments]), 200
