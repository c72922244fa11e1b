"""
Delete with dependents.

Removing a user removes the posts it owns and the comments it wrote.
Comments written by other users on that user's posts are left in place.
Removing a post removes every comment attached to it.

With transactions enabled each cascade runs inside a single MongoDB
transaction, so a failure part way through rolls every step back.
Transactions need a replica set.
"""

import logging

from pymongo.errors import PyMongoError

from blog_backend.errors import NotFound, OperationFailed
from blog_backend.stores import UserStore, PostStore, CommentStore

logger = logging.getLogger(__name__)


class CascadeCoordinator:

    def __init__(self, client, db, use_transactions=True):
        self.client = client
        self.users = UserStore(db)
        self.posts = PostStore(db)
        self.comments = CommentStore(db)
        self.use_transactions = use_transactions

    def delete_user(self, user_id):
        """Delete a user, its posts and its comments.

        ``user_id`` is an ObjectId. Returns the number of documents removed
        per collection.
        """
        return self._run(lambda session: self._delete_user(user_id, session), "user", user_id)

    def delete_post(self, post_id):
        return self._run(lambda session: self._delete_post(post_id, session), "post", post_id)

    def _delete_user(self, user_id, session):
        if not self.users.delete(user_id, session=session):
            raise NotFound('User not found')
        owner = str(user_id)
        return {
            'users': 1,
            'posts': self.posts.delete_by_user(owner, session=session),
            'comments': self.comments.delete_by_user(owner, session=session),
        }

    def _delete_post(self, post_id, session):
        if not self.posts.delete(post_id, session=session):
            raise NotFound('Post not found')
        return {
            'posts': 1,
            'comments': self.comments.delete_by_post(str(post_id), session=session),
        }

    def _run(self, steps, kind, object_id):
        try:
            if not self.use_transactions:
                return steps(None)
            with self.client.start_session() as session:
                return session.with_transaction(steps)
        except PyMongoError as e:
            logger.error(f"Cascade delete of {kind} {object_id} failed: {e}", exc_info=True)
            raise OperationFailed(f"Deleting {kind} failed") from e
