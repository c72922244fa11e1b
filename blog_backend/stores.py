"""
Entity stores for users, posts and comments.

Each store owns one MongoDB collection. Write methods accept an optional
``session`` so the cascade coordinator can run them inside a transaction.
Driver errors are left to the caller.
"""

import re

from pymongo import ASCENDING, DESCENDING, ReturnDocument

from blog_backend.mongo_models import User, Post, Comment, utcnow


def _session_kwargs(session):
    return {'session': session} if session is not None else {}


class EntityStore:
    model = None

    def __init__(self, db):
        self.db = db
        self.collection = db[self.model.collection_name]

    def find_by_id(self, object_id, session=None):
        data = self.collection.find_one({'_id': object_id}, **_session_kwargs(session))
        return self.model.from_mongo(data)

    def insert(self, document, session=None):
        data = document.to_dict()
        data.pop('_id', None)
        result = self.collection.insert_one(data, **_session_kwargs(session))
        document._id = result.inserted_id
        return document

    def update(self, object_id, fields, session=None):
        """Apply ``fields`` with $set and return the updated document, or None."""
        changes = dict(fields)
        changes['updatedAt'] = utcnow()
        data = self.collection.find_one_and_update(
            {'_id': object_id},
            {'$set': changes},
            return_document=ReturnDocument.AFTER,
            **_session_kwargs(session)
        )
        return self.model.from_mongo(data)

    def delete(self, object_id, session=None):
        result = self.collection.delete_one({'_id': object_id}, **_session_kwargs(session))
        return result.deleted_count == 1

    def _find_many(self, query, sort_field='createdAt', direction=DESCENDING):
        # _id breaks ties between documents created in the same millisecond
        cursor = self.collection.find(query).sort([(sort_field, direction), ('_id', direction)])
        return [self.model.from_mongo(data) for data in cursor]


class UserStore(EntityStore):
    model = User

    def ensure_indexes(self):
        self.collection.create_index('username', unique=True)
        self.collection.create_index('email', unique=True)

    def find_by_email(self, email):
        return User.from_mongo(self.collection.find_one({'email': email}))

    def find_conflict(self, username=None, email=None, exclude_id=None):
        """Return a user already holding ``username`` or ``email``, if any."""
        clauses = []
        if username is not None:
            clauses.append({'username': username})
        if email is not None:
            clauses.append({'email': email})
        if not clauses:
            return None
        query = {'$or': clauses}
        if exclude_id is not None:
            query['_id'] = {'$ne': exclude_id}
        return User.from_mongo(self.collection.find_one(query))


class PostStore(EntityStore):
    model = Post

    def ensure_indexes(self):
        self.collection.create_index('userId')

    def search(self, title_query=None):
        query = {}
        if title_query:
            query['title'] = {'$regex': re.escape(title_query), '$options': 'i'}
        return self._find_many(query)

    def find_by_user(self, user_id):
        return self._find_many({'userId': user_id})

    def delete_by_user(self, user_id, session=None):
        return self.collection.delete_many({'userId': user_id}, **_session_kwargs(session)).deleted_count


class CommentStore(EntityStore):
    model = Comment

    def ensure_indexes(self):
        self.collection.create_index('postId')
        self.collection.create_index('userId')

    def find_by_post(self, post_id):
        return self._find_many({'postId': post_id}, direction=ASCENDING)

    def delete_by_post(self, post_id, session=None):
        return self.collection.delete_many({'postId': post_id}, **_session_kwargs(session)).deleted_count

    def delete_by_user(self, user_id, session=None):
        return self.collection.delete_many({'userId': user_id}, **_session_kwargs(session)).deleted_count


def ensure_indexes(db):
    for store_cls in (UserStore, PostStore, CommentStore):
        store_cls(db).ensure_indexes()
