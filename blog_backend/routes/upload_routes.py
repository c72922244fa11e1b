import os

from flask import Blueprint, request, jsonify, current_app, send_from_directory
from werkzeug.utils import secure_filename

from blog_backend.auth import token_required
from blog_backend.errors import ValidationError

upload_bp = Blueprint('upload_api', __name__)

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}


def get_upload_folder():
    return os.path.abspath(current_app.config['UPLOAD_FOLDER'])


@upload_bp.record_once
def record(state):
    upload_folder = os.path.abspath(state.app.config['UPLOAD_FOLDER'])
    if not os.path.exists(upload_folder):
        os.makedirs(upload_folder)
        state.app.logger.info(f"UPLOAD_FOLDER created: {upload_folder}")


def safe_image_name(name):
    filename = secure_filename(name or '')
    if not filename or '.' not in filename:
        raise ValidationError([{'field': 'img', 'message': 'A file name with an extension is required'}])
    if filename.rsplit('.', 1)[1].lower() not in ALLOWED_EXTENSIONS:
        raise ValidationError([{'field': 'img', 'message': 'Only image files can be uploaded'}])
    return filename


@upload_bp.route('/api/upload', methods=['POST'])
@token_required
def upload_image():
    file = request.files.get('file')
    if file is None:
        raise ValidationError([{'field': 'file', 'message': 'File is required'}])

    filename = safe_image_name(request.form.get('img') or file.filename)
    file.save(os.path.join(get_upload_folder(), filename))

    current_app.logger.info(f"Image uploaded: {filename}")
    return jsonify({'message': 'Image has been uploaded successfully!', 'filename': filename}), 200


@upload_bp.route('/images/<path:filename>', methods=['GET'])
def get_image(filename):
    return send_from_directory(get_upload_folder(), filename)
