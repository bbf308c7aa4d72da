"""
Attachment Storage Service
Validates uploaded evidence and stores it in S3, or on local disk when S3 is not configured
"""

import io
import os
import uuid

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from sayit.errors import UpstreamFailure, ValidationError
from sayit.models.complaint import Attachment, ResourceType


COMPRESSIBLE_TYPES = {'image/jpeg', 'image/png'}


def _file_size(file):
    """Size of an uploaded stream without consuming it"""
    stream = file.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def validate_files(files, max_count):
    """
    Check count, MIME type and size of uploaded files

    Args:
        files: list of werkzeug FileStorage objects
        max_count: maximum number of files accepted

    Raises:
        ValidationError naming each offending file
    """
    files = [file for file in files if file and file.filename]
    if len(files) > max_count:
        raise ValidationError(f'At most {max_count} files may be attached',
                              fields={'attachments': f'Maximum {max_count} files'})

    allowed = current_app.config['ALLOWED_MIME_TYPES']
    max_bytes = current_app.config['MAX_ATTACHMENT_BYTES']
    errors = {}
    for file in files:
        if file.mimetype not in allowed:
            errors[file.filename] = f'File type {file.mimetype} is not allowed'
        elif _file_size(file) > max_bytes:
            errors[file.filename] = f'File exceeds {max_bytes // (1024 * 1024)} MB'

    if errors:
        raise ValidationError('Invalid attachments', fields=errors)
    return files


class S3Storage:
    """Object storage on S3"""

    @staticmethod
    def is_configured():
        config = current_app.config
        return bool(config.get('S3_BUCKET_NAME') and config.get('AWS_ACCESS_KEY_ID'))

    @staticmethod
    def get_s3_client():
        """Get initialized S3 client"""
        return boto3.client(
            's3',
            aws_access_key_id=current_app.config.get('AWS_ACCESS_KEY_ID'),
            aws_secret_access_key=current_app.config.get('AWS_SECRET_ACCESS_KEY'),
            region_name=current_app.config.get('AWS_REGION', 'us-east-1')
        )

    @staticmethod
    def public_url(key):
        bucket_name = current_app.config['S3_BUCKET_NAME']
        region = current_app.config.get('AWS_REGION', 'us-east-1')
        return f'https://{bucket_name}.s3.{region}.amazonaws.com/{key}'

    @staticmethod
    def put(fileobj, key, content_type):
        try:
            S3Storage.get_s3_client().upload_fileobj(
                fileobj,
                current_app.config['S3_BUCKET_NAME'],
                key,
                ExtraArgs={'ContentType': content_type}
            )
        except (ClientError, BotoCoreError) as e:
            current_app.logger.error(f'S3 upload error: {str(e)}')
            raise UpstreamFailure('File storage is unavailable') from e
        return S3Storage.public_url(key)

    @staticmethod
    def remove(key):
        try:
            S3Storage.get_s3_client().delete_object(Bucket=current_app.config['S3_BUCKET_NAME'], Key=key)
            return True
        except (ClientError, BotoCoreError) as e:
            current_app.logger.error(f'S3 delete error: {str(e)}')
            return False


class LocalStorage:
    """Local disk fallback for development"""

    @staticmethod
    def folder():
        folder = current_app.config.get('UPLOAD_FOLDER', 'uploads')
        if not os.path.isabs(folder):
            folder = os.path.join(current_app.root_path, '..', folder)
        return folder

    @staticmethod
    def put(fileobj, key, content_type):
        path = os.path.join(LocalStorage.folder(), key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'wb') as target:
                target.write(fileobj.read())
        except OSError as e:
            current_app.logger.error(f'Local upload error: {str(e)}')
            raise UpstreamFailure('File storage is unavailable') from e
        return f'/uploads/{key}'

    @staticmethod
    def remove(key):
        try:
            os.remove(os.path.join(LocalStorage.folder(), key))
            return True
        except OSError as e:
            current_app.logger.error(f'Local delete error: {str(e)}')
            return False


def backend():
    return S3Storage if S3Storage.is_configured() else LocalStorage


def compress_image(file, max_size=(1920, 1080), quality=85):
    """
    Compress and resize an image

    Returns:
        JPEG bytes stream, or None when the file is not a readable image
    """
    try:
        img = Image.open(file.stream)

        if img.mode in ('RGBA', 'LA', 'P'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'P':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1] if img.mode in ('RGBA', 'LA') else None)
            img = background

        img.thumbnail(max_size, Image.Resampling.LANCZOS)

        output = io.BytesIO()
        img.save(output, format='JPEG', quality=quality, optimize=True)
        output.seek(0)
        return output
    except (UnidentifiedImageError, OSError) as e:
        current_app.logger.warning(f'Image compression skipped: {str(e)}')
        file.stream.seek(0)
        return None


def store_file(file, folder='complaints', compress=True):
    """
    Store one validated file

    Returns:
        Unsaved Attachment row describing the stored object
    """
    original_name = secure_filename(file.filename) or 'attachment'
    ext = original_name.rsplit('.', 1)[1].lower() if '.' in original_name else 'bin'
    content_type = file.mimetype
    size = _file_size(file)

    payload = file.stream
    if compress and content_type in COMPRESSIBLE_TYPES:
        compressed = compress_image(file)
        if compressed:
            payload = compressed
            ext = 'jpg'
            content_type = 'image/jpeg'
            size = compressed.getbuffer().nbytes

    key = f'{folder}/{uuid.uuid4().hex}.{ext}'
    url = backend().put(payload, key, content_type)

    return Attachment(
        url=url,
        storage_key=key,
        original_name=original_name,
        file_type=content_type,
        file_size=size,
        resource_type=ResourceType.from_mimetype(content_type).value,
    )


def store_files(files, folder='complaints', compress=True):
    """Store several files, removing already stored ones if a later upload fails"""
    stored = []
    try:
        for file in files:
            stored.append(store_file(file, folder, compress))
    except UpstreamFailure:
        for attachment in stored:
            backend().remove(attachment.storage_key)
        raise
    return stored


def delete_attachment(attachment):
    return backend().remove(attachment.storage_key)
