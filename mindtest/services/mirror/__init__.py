"""Optional secondary store receiving best-effort copies of every write."""

from mindtest.config import Settings

from .base import BaseMirrorStore
from .forwarder import MirrorForwarder, MirrorWrite
from .null import NullMirrorStore

__all__ = [
    "BaseMirrorStore",
    "MirrorForwarder",
    "MirrorWrite",
    "NullMirrorStore",
    "get_mirror_store",
]


def get_mirror_store(settings: Settings) -> BaseMirrorStore:
    """
    Build the configured mirror store.

    Falls back to NullMirrorStore if Supabase credentials are not configured.
    """
    if not settings.mirror_configured:
        return NullMirrorStore()

    # Imported lazily so the supabase client is only built when configured
    from .supabase_store import SupabaseMirrorStore

    return SupabaseMirrorStore(url=settings.supabase_url, key=settings.supabase_anon_key)
