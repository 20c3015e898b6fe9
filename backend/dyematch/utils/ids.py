"""
DyeMatch ID Utilities
Generate unique ids for requests and image sessions.
"""
import uuid
from datetime import datetime


def generate_request_id(prefix: str = "req") -> str:
    """
    Generate a unique id for tracking.

    Args:
        prefix: Short tag identifying the id kind ("req", "img", ...)

    Returns:
        Unique id string like "img-20250101120000-1a2b3c4d"
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = str(uuid.uuid4())[:8]
    return f"{prefix}-{timestamp}-{short_uuid}"

