import os
import logging
from logging.handlers import RotatingFileHandler

from flask import Flask
from flask_cors import CORS
from pymongo.errors import PyMongoError
from werkzeug.middleware.proxy_fix import ProxyFix

from blog_backend.config import Settings
from blog_backend.errors import register_error_handlers
from blog_backend.extensions import bcrypt, get_mongo_db, mongo
from blog_backend.stores import ensure_indexes
from blog_backend.tokens import TokenService

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'


def configure_logging(log_dir):
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)
    file_handler = RotatingFileHandler(os.path.join(log_dir, 'blog.log'), maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s'))
    console_handler.setLevel(logging.INFO)

    # app.logger (blog_backend.app) propagates here along with the store and cascade loggers
    package_logger = logging.getLogger('blog_backend')
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.addHandler(file_handler)
    package_logger.addHandler(console_handler)
    package_logger.setLevel(logging.INFO)


def create_app(test_config=None):
    app = Flask(__name__)

    # --- Settings ---
    settings = Settings.from_mapping(test_config) if test_config else Settings.from_env()
    app.config.update(settings.to_flask_config())
    app.config['MONGO_URI'] = settings.mongo_uri
    if test_config:
        app.config.from_mapping(test_config)

    # --- Logging ---
    configure_logging(settings.log_dir)
    app.logger.info('Blog API startup')

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)
    CORS(app, supports_credentials=True, resources={r"/api/*": {"origins": settings.client_origin}})

    # --- Extensions ---
    mongo.init_app(app, tz_aware=True, serverSelectionTimeoutMS=5000)
    bcrypt.init_app(app)
    app.extensions['token_service'] = TokenService.from_settings(settings)

    # --- Blueprints ---
    from blog_backend.routes.auth_routes import auth_bp
    from blog_backend.routes.user_routes import user_bp
    from blog_backend.routes.post_routes import post_bp
    from blog_backend.routes.comment_routes import comment_bp
    from blog_backend.routes.upload_routes import upload_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(user_bp, url_prefix='/api/users')
    app.register_blueprint(post_bp, url_prefix='/api/posts')
    app.register_blueprint(comment_bp, url_prefix='/api/comments')
    app.register_blueprint(upload_bp)

    register_error_handlers(app)

    # An unreachable database is logged; the app keeps serving.
    with app.app_context():
        try:
            ensure_indexes(get_mongo_db())
            app.logger.info('Database connected successfully!')
        except PyMongoError as e:
            app.logger.error(f"Database connection failed: {e}")

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=app.config['PORT'], debug=False)
