"""ImagePaths value object for consistent image handling on watch records.

Hey future me - every WatchRecord carries exactly one ImagePaths!
The three URLs come from different places:
- poster   -> the live feed (first <img> in the RSS description)
- backdrop -> TMDb lookup or the customBackdrops.json mapping
- image    -> what the template actually renders

image is DERIVED: backdrop wins over poster. Never set it by hand, use the
with_* helpers so the rule stays in one place.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ImagePaths:
    """Poster/backdrop URLs plus the resolved display image.

    Attributes:
        poster: Poster URL ("" if not available)
        backdrop: Backdrop URL ("" if not available)
        image: Display choice - backdrop, else poster, else a stored image
    """

    poster: str = ""
    backdrop: str = ""
    image: str = ""

    @classmethod
    def resolve(cls, poster: str = "", backdrop: str = "", image: str = "") -> "ImagePaths":
        """Create ImagePaths with the display image resolved (backdrop > poster)."""
        poster = (poster or "").strip()
        backdrop = (backdrop or "").strip()
        return cls(poster=poster, backdrop=backdrop, image=backdrop or poster or (image or "").strip())

    @property
    def has_image(self) -> bool:
        """True if a display image or a backdrop exists."""
        return bool(self.image or self.backdrop)

    def with_backdrop(self, url: str) -> "ImagePaths":
        """Create new ImagePaths with a backdrop (immutable pattern)."""
        return ImagePaths.resolve(poster=self.poster, backdrop=url, image=self.image)

    def __bool__(self) -> bool:
        """Enable truthiness check: if record.images: ..."""
        return self.has_image
