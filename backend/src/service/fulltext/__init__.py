from .resolver import FullTextResolver, build_default_resolver
from .sources import (
    AbstractFallbackSource,
    ProvidedTextSource,
    RemoteUrlSource,
    TextSource,
    ZoteroAttachmentSource,
)

__all__ = [
    "FullTextResolver",
    "build_default_resolver",
    "TextSource",
    "ProvidedTextSource",
    "ZoteroAttachmentSource",
    "RemoteUrlSource",
    "AbstractFallbackSource",
]
