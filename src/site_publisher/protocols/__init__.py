"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (HTTP gateway -> in-process fake, Redis -> memory)
- Unit testing with mock implementations
- Clear separation of concerns
"""

from .asset_injector import AssetInjector
from .command_gateway import CommandGateway
from .content_source import ContentSource
from .key_value_storage import KeyValueStorage

__all__ = [
    "AssetInjector",
    "CommandGateway",
    "ContentSource",
    "KeyValueStorage",
]
