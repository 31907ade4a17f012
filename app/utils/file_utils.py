"""
File upload utilities for validating and storing uploaded media.
Uploaded files are written under the upload directory and served from the uploads URL prefix.
"""

import io
import uuid
from pathlib import Path
from typing import Dict, List, Optional
from PIL import Image
import aiofiles
from fastapi import UploadFile

from app.config import get_settings
from app.utils.exceptions import (
    FileUploadError,
    UnsupportedFileTypeError,
    FileSizeExceededError
)
import logging

logger = logging.getLogger(__name__)

settings = get_settings()


class FileValidator:
    """Utility class for file validation operations."""

    # Supported formats and their extensions
    IMAGE_FORMATS: Dict[str, List[str]] = {
        'image/jpeg': ['.jpg', '.jpeg'],
        'image/png': ['.png'],
        'image/webp': ['.webp'],
        'image/gif': ['.gif'],
    }

    VIDEO_FORMATS: Dict[str, List[str]] = {
        'video/mp4': ['.mp4'],
        'video/quicktime': ['.mov'],
        'video/webm': ['.webm'],
    }

    # Pillow format names per MIME type
    PIL_FORMATS = {
        'image/jpeg': 'jpeg',
        'image/png': 'png',
        'image/webp': 'webp',
        'image/gif': 'gif',
    }

    @classmethod
    def validate_mime_type(cls, mime_type: str, allowed: List[str]) -> str:
        """
        Validate MIME type against an allow-list.

        Raises:
            UnsupportedFileTypeError: If the type is not allowed
        """
        if not mime_type or mime_type not in allowed:
            raise UnsupportedFileTypeError(mime_type or "unknown", allowed)
        return mime_type

    @classmethod
    def validate_file_extension(cls, filename: str, mime_type: str) -> str:
        """
        Validate that the extension matches the MIME type.

        Returns:
            Lowercase file extension

        Raises:
            FileUploadError: If the extension is missing or mismatched
        """
        extension = Path(filename or "").suffix.lower()
        expected = {**cls.IMAGE_FORMATS, **cls.VIDEO_FORMATS}.get(mime_type, [])
        if not extension:
            raise FileUploadError("File must have an extension")
        if extension not in expected:
            raise FileUploadError(f"File extension '{extension}' doesn't match MIME type '{mime_type}'")
        return extension

    @classmethod
    def validate_file_size(cls, file_size: int, max_size: int) -> int:
        """
        Validate file size.

        Raises:
            FileUploadError: If the file is empty
            FileSizeExceededError: If the file is too large
        """
        if file_size <= 0:
            raise FileUploadError("File is empty")
        if file_size > max_size:
            raise FileSizeExceededError(file_size, max_size)
        return file_size

    @classmethod
    def validate_image_content(cls, content: bytes, mime_type: str) -> None:
        """
        Open the image with Pillow to reject corrupt or disguised files.

        Raises:
            FileUploadError: If the content is not a valid image of the declared type
        """
        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                pil_format = (img.format or "").lower()
        except Exception as e:
            raise FileUploadError(f"Invalid image file: {str(e)}")

        expected = cls.PIL_FORMATS.get(mime_type)
        if expected and pil_format != expected:
            raise FileUploadError(f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'")

    @classmethod
    async def read_image(cls, file: UploadFile, max_size: Optional[int] = None) -> bytes:
        """
        Validate an uploaded image and return its content.

        Args:
            file: Uploaded file
            max_size: Size limit in bytes, defaults to the image limit

        Returns:
            File content
        """
        mime_type = cls.validate_mime_type(file.content_type or "", settings.allowed_image_types)
        cls.validate_file_extension(file.filename, mime_type)

        await file.seek(0)
        content = await file.read()
        cls.validate_file_size(len(content), max_size or settings.max_file_size)
        cls.validate_image_content(content, mime_type)
        return content

    @classmethod
    async def read_story_media(cls, file: UploadFile) -> bytes:
        """
        Validate an uploaded story image or video and return its content.

        Args:
            file: Uploaded file

        Returns:
            File content
        """
        allowed = settings.allowed_image_types + settings.allowed_video_types
        mime_type = cls.validate_mime_type(file.content_type or "", allowed)
        cls.validate_file_extension(file.filename, mime_type)

        await file.seek(0)
        content = await file.read()
        cls.validate_file_size(len(content), settings.story_max_file_size)
        if mime_type in settings.allowed_image_types:
            cls.validate_image_content(content, mime_type)
        return content

    @staticmethod
    def is_video(mime_type: Optional[str]) -> bool:
        return bool(mime_type) and mime_type.startswith("video/")


class FileStorage:
    """Utility class for file storage operations."""

    def __init__(self, base_dir: Optional[Path] = None, url_prefix: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.upload_dir)
        self.url_prefix = (url_prefix or settings.uploads_url_prefix).rstrip("/")
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def generate_unique_filename(self, original_filename: str) -> str:
        """
        Generate a unique filename while preserving the extension.

        Args:
            original_filename: Original filename

        Returns:
            Unique filename with UUID
        """
        extension = Path(original_filename or "").suffix.lower()
        return f"{uuid.uuid4().hex}{extension}"

    def public_url(self, relative_path: str) -> str:
        """URL under which a stored file is served."""
        return f"{self.url_prefix}/{relative_path}"

    def path_for_url(self, url: Optional[str]) -> Optional[Path]:
        """
        Map a served URL back to its file, if it points into the upload directory.

        Args:
            url: Stored URL

        Returns:
            File path, or None for external URLs
        """
        if not url or not url.startswith(f"{self.url_prefix}/"):
            return None
        relative = url[len(self.url_prefix) + 1:]
        path = (self.base_dir / relative).resolve()
        if self.base_dir.resolve() not in path.parents:
            return None
        return path

    async def save_bytes(self, content: bytes, original_filename: str, subdir: str) -> str:
        """
        Write content to a new file under ``subdir``.

        Args:
            content: File content
            original_filename: Used for the extension only
            subdir: Directory below the upload root (e.g. "stories")

        Returns:
            Public URL of the stored file

        Raises:
            FileUploadError: If the file cannot be written
        """
        directory = self.base_dir / subdir
        file_path = directory / self.generate_unique_filename(original_filename)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            # Clean up partial file if it exists
            if file_path.exists():
                file_path.unlink()
            raise FileUploadError(f"Failed to save file: {str(e)}")

        relative_path = file_path.relative_to(self.base_dir).as_posix()
        logger.info(f"Stored upload {relative_path} ({len(content)} bytes)")
        return self.public_url(relative_path)

    def delete_file(self, url: Optional[str]) -> bool:
        """
        Delete a stored upload by its URL. External URLs are left alone.

        Args:
            url: Stored URL

        Returns:
            True if a file was deleted, False otherwise
        """
        path = self.path_for_url(url)
        if path is None:
            return False
        try:
            if path.exists():
                path.unlink()
                logger.info(f"Deleted upload {path}")
                return True
            return False
        except OSError as e:
            logger.warning(f"Could not delete upload {path}: {e}")
            return False
