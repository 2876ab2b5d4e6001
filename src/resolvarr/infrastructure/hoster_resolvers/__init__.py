"""Host resolvers, gate client, fan-out and the resolution orchestrator."""

from __future__ import annotations

from ._base import HostResolver
from ._verify import ReachabilityProbe
from .base64_redirect import Base64RedirectResolver
from .classification import HostTable
from .fanout import FanOutCoordinator
from .gate import GatedRedirectClient
from .gdflix import GDFlixResolver
from .gofile import GoFileResolver
from .hubcloud import HubCloudResolver
from .hubdrive import HubDriveResolver
from .orchestrator import ResolutionOrchestrator
from .packed_embed import PackedEmbedResolver
from .pixeldrain import PixelDrainResolver

__all__ = [
    "Base64RedirectResolver",
    "FanOutCoordinator",
    "GDFlixResolver",
    "GatedRedirectClient",
    "GoFileResolver",
    "HostResolver",
    "HostTable",
    "HubCloudResolver",
    "HubDriveResolver",
    "PackedEmbedResolver",
    "PixelDrainResolver",
    "ReachabilityProbe",
    "ResolutionOrchestrator",
]
