"""FastAPI dependencies - process-wide singletons."""

from datetime import timedelta
from functools import lru_cache

from backend.config import settings
from backend.utils.link_store import ShareLinkStore
from backend.services.parse_service import ParseService
from backend.services.share_service import ShareService
from backend.services.diagram_service import DiagramService


# Process-wide singletons (single process, no DB)
@lru_cache(maxsize=1)
def get_link_store() -> ShareLinkStore:
    """Singleton ShareLinkStore - share links live as long as the process."""
    return ShareLinkStore(
        ttl=timedelta(hours=settings.share_ttl_hours),
        key_length=settings.share_key_length,
    )


@lru_cache(maxsize=1)
def get_parse_service() -> ParseService:
    """Singleton ParseService."""
    return ParseService()


@lru_cache(maxsize=1)
def get_share_service() -> ShareService:
    """Create ShareService with its store (singleton)."""
    return ShareService(
        store=get_link_store(),
        base_url=settings.public_base_url,
        max_payload_chars=settings.share_max_payload_chars,
    )


@lru_cache(maxsize=1)
def get_diagram_service() -> DiagramService:
    """Singleton DiagramService."""
    return DiagramService(width=settings.render_width, height=settings.render_height)
