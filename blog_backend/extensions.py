from flask import current_app
from flask_pymongo import PyMongo
from flask_bcrypt import Bcrypt

from blog_backend.errors import OperationFailed

# Instances are bound to the application in app.create_app().
mongo = PyMongo()
bcrypt = Bcrypt()


def get_mongo_db():
    """Returns the MongoDB database named in the app config."""
    db_name = current_app.config.get("MONGO_DBNAME")
    if not db_name or mongo.cx is None:
        raise OperationFailed("MongoDB is not configured or connected.")
    return mongo.cx[db_name]
