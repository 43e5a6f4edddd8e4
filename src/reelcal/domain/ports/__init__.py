"""Domain ports (interfaces implemented by infrastructure)."""

from reelcal.domain.ports.image_provider import IImageProvider, ImageResult, ProviderName

__all__ = ["IImageProvider", "ImageResult", "ProviderName"]
