import datetime

from bson.objectid import ObjectId


def utcnow():
    """Current UTC time at the millisecond precision BSON stores."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def serialize_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        return value.isoformat()
    return value


class Document:
    """Base for the documents stored in MongoDB.

    ``to_dict`` gives the stored form, ``to_json`` the API form.
    """

    collection_name = None
    fields = ()
    private_fields = ()

    def __init__(self, _id=None, createdAt=None, updatedAt=None, **values):
        self._id = _id
        now = utcnow()
        self.createdAt = createdAt or now
        self.updatedAt = updatedAt or now
        for name in self.fields:
            setattr(self, name, values.get(name, self.default_for(name)))

    def default_for(self, name):
        return None

    def to_dict(self):
        data = {name: getattr(self, name) for name in self.fields}
        data['createdAt'] = self.createdAt
        data['updatedAt'] = self.updatedAt
        if self._id is not None:
            data['_id'] = self._id
        return data

    def to_json(self):
        data = self.to_dict()
        for name in self.private_fields:
            data.pop(name, None)
        return {key: serialize_value(value) for key, value in data.items()}

    @classmethod
    def from_mongo(cls, data):
        if data is None:
            return None
        known = {name: data.get(name) for name in cls.fields if name in data}
        return cls(
            _id=data.get('_id'),
            createdAt=data.get('createdAt'),
            updatedAt=data.get('updatedAt'),
            **known
        )

    def __repr__(self):
        return f'<{type(self).__name__} {self._id}>'


class User(Document):
    collection_name = 'users'
    fields = ('username', 'email', 'password', 'profilePic')
    private_fields = ('password',)

    def default_for(self, name):
        return '' if name == 'profilePic' else None


class Post(Document):
    collection_name = 'posts'
    fields = ('title', 'desc', 'photo', 'username', 'userId', 'categories')

    def default_for(self, name):
        return [] if name == 'categories' else None


class Comment(Document):
    collection_name = 'comments'
    fields = ('comment', 'author', 'postId', 'userId')
