"""Resource providers and the Cloudflare API client."""

from .base import RemoteResource, ResourceProvider
from .cloudflare_client import CloudflareClient
from .inmemory import InMemoryResourceProvider
from .output import extract_identifier, parse_listing, parse_listing_text, scan_listing_text
from .wrangler import WranglerCLIProvider

__all__ = [
    "CloudflareClient",
    "InMemoryResourceProvider",
    "RemoteResource",
    "ResourceProvider",
    "WranglerCLIProvider",
    "extract_identifier",
    "parse_listing",
    "parse_listing_text",
    "scan_listing_text",
]
