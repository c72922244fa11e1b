from flask import Blueprint, request, jsonify, current_app
from pymongo.errors import PyMongoError

from blog_backend.auth import token_required, require_owner
from blog_backend.cascade import CascadeCoordinator
from blog_backend.errors import NotFound, ValidationError, translate_store_error
from blog_backend.extensions import get_mongo_db, mongo
from blog_backend.mongo_models import Post
from blog_backend.stores import PostStore, UserStore
from blog_backend.validation import PostCreate, PostUpdate, parse_object_id, validate_body

post_bp = Blueprint('post_api', __name__)


def get_cascade():
    return CascadeCoordinator(
        mongo.cx,
        get_mongo_db(),
        use_transactions=current_app.config.get('MONGO_USE_TRANSACTIONS', True),
    )


def load_post(posts, post_id):
    post = posts.find_by_id(post_id)
    if not post:
        raise NotFound('Post not found')
    return post


# --- Write operations (session token required) ---

@post_bp.route('/create', methods=['POST'])
@token_required
def create_post():
    data = validate_body(PostCreate, request.get_json(silent=True))
    require_owner(data.userId, 'post')

    db_mongo = get_mongo_db()
    try:
        if not UserStore(db_mongo).find_by_id(parse_object_id(data.userId, 'userId')):
            raise NotFound('User not found')

        new_post = Post(**data.changes())
        PostStore(db_mongo).insert(new_post)
    except PyMongoError as e:
        current_app.logger.error(f"Error creating post: {e}", exc_info=True)
        raise translate_store_error(e, 'Post creation') from e

    current_app.logger.info(f"New post created by user {data.userId}: {data.title}")
    return jsonify(new_post.to_json()), 200


@post_bp.route('/<string:post_id>', methods=['PUT'])
@token_required
def update_post(post_id):
    object_id = parse_object_id(post_id, 'post ID')
    changes = validate_body(PostUpdate, request.get_json(silent=True)).changes()
    if not changes:
        raise ValidationError([{'field': 'body', 'message': 'No updatable fields supplied'}])

    posts = PostStore(get_mongo_db())
    try:
        require_owner(load_post(posts, object_id).userId, 'post')
        updated_post = posts.update(object_id, changes)
    except PyMongoError as e:
        current_app.logger.error(f"Error updating post {post_id}: {e}", exc_info=True)
        raise translate_store_error(e, 'Post update') from e

    if not updated_post:
        raise NotFound('Post not found')

    current_app.logger.info(f"Post updated: {post_id}")
    return jsonify(updated_post.to_json()), 200


@post_bp.route('/<string:post_id>', methods=['DELETE'])
@token_required
def delete_post(post_id):
    object_id = parse_object_id(post_id, 'post ID')

    try:
        require_owner(load_post(PostStore(get_mongo_db()), object_id).userId, 'post')
    except PyMongoError as e:
        current_app.logger.error(f"Error deleting post {post_id}: {e}", exc_info=True)
        raise translate_store_error(e, 'Post deletion') from e

    removed = get_cascade().delete_post(object_id)
    current_app.logger.info(f"Post deleted: {post_id} (comments removed: {removed['comments']})")
    return jsonify({'message': 'Post has been deleted!', 'deleted': removed}), 200


# --- Public reads ---

@post_bp.route('/<string:post_id>', methods=['GET'])
def get_post(post_id):
    object_id = parse_object_id(post_id, 'post ID')
    try:
        post = load_post(PostStore(get_mongo_db()), object_id)
    except PyMongoError as e:
        current_app.logger.error(f"Error retrieving post: {e}", exc_info=True)
        raise translate_store_error(e, 'Post retrieval') from e

    current_app.logger.info(f"Post retrieved: {post_id}")
    return jsonify(post.to_json()), 200


@post_bp.route('/', methods=['GET'], strict_slashes=False)
def get_posts():
    search = request.args.get('search', '', type=str)
    try:
        posts = PostStore(get_mongo_db()).search(search)
    except PyMongoError as e:
        current_app.logger.error(f"Error retrieving posts: {e}", exc_info=True)
        raise translate_store_error(e, 'Posts retrieval') from e

    current_app.logger.info("All posts retrieved")
    return jsonify([post.to_json() for post in posts]), 200


@post_bp.route('/user/<string:user_id>', methods=['GET'])
def get_user_posts(user_id):
    parse_object_id(user_id, 'user ID')
    try:
        posts = PostStore(get_mongo_db()).find_by_user(user_id)
    except PyMongoError as e:
        current_app.logger.error(f"Error retrieving user's posts: {e}", exc_info=True)
        raise translate_store_error(e, 'Posts retrieval') from e

    current_app.logger.info(f"Posts retrieved for user: {user_id}")
    return jsonify([post.to_json() for post in posts]), 200
