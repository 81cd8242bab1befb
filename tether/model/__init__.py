from .transport import TransportType
from .loader import MetadataLoader, DEFAULT_METADATA_DIR

__all__ = ["TransportType",
           "MetadataLoader",
           "DEFAULT_METADATA_DIR"]
