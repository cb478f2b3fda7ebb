"""Remote theme-asset API access."""

from .client import AssetResource, ThemeClient
from .schemas import Asset, AssetSummary, AssetUpload, Theme

__all__ = ["Asset", "AssetResource", "AssetSummary", "AssetUpload", "Theme", "ThemeClient"]
