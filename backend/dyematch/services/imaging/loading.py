"""
DyeMatch Image Loading
Handles upload validation and decoding into raster surfaces.
"""
import io

from fastapi import HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError

from dyematch.config import config
from .raster import ImageSurface


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate uploaded file for size and format compliance.

    Args:
        file: FastAPI UploadFile object

    Raises:
        HTTPException: 400 for oversized files, 415 for unsupported formats
    """
    # file.size may be None for some clients
    if file.size and file.size > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    if file.filename:
        ext = file.filename.lower().rsplit('.', 1)[-1] if '.' in file.filename else ''
        if f".{ext}" not in config.SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file extension. Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
            )


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Validate file magic bytes to ensure it's actually an image.

    Args:
        file_bytes: Raw file bytes

    Returns:
        Detected MIME type

    Raises:
        HTTPException: 400 for invalid/corrupt files
    """
    if len(file_bytes) < 12:
        raise HTTPException(status_code=400, detail="File too small or corrupt")

    if file_bytes.startswith(b'\xff\xd8\xff'):
        return "image/jpeg"
    elif file_bytes.startswith(b'\x89PNG\r\n\x1a\n'):
        return "image/png"
    elif file_bytes.startswith(b'GIF8'):
        return "image/gif"
    elif file_bytes[:4] == b'RIFF' and file_bytes[8:12] == b'WEBP':
        return "image/webp"
    else:
        raise HTTPException(
            status_code=400,
            detail="Invalid image file. Magic bytes don't match supported formats."
        )


def decode_image(file_bytes: bytes) -> ImageSurface:
    """
    Decode raw bytes into an RGBA surface.

    Raises:
        HTTPException: 400 for oversized, corrupt or empty images
    """
    if len(file_bytes) > config.MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    validate_magic_bytes(file_bytes)

    try:
        with Image.open(io.BytesIO(file_bytes)) as pil_image:
            surface = ImageSurface.from_pil(pil_image)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Failed to decode image: {str(e)}")

    if surface.width == 0 or surface.height == 0:
        raise HTTPException(status_code=400, detail="Image has no pixels")

    return surface


async def read_image(file: UploadFile) -> ImageSurface:
    """
    Safely read and decode an uploaded image.

    Args:
        file: FastAPI UploadFile object

    Returns:
        ImageSurface holding the decoded RGBA bitmap

    Raises:
        HTTPException: 400 for read/decode errors, 415 for unsupported formats
    """
    validate_file_upload(file)

    try:
        file_bytes = await file.read()
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    return decode_image(file_bytes)
