"""Domain value objects."""

from reelcal.domain.value_objects.civil_date import (
    CIVIL_NOON,
    DEFAULT_TIMEZONE,
    CivilDate,
    CivilDateNormalizer,
)
from reelcal.domain.value_objects.image_paths import ImagePaths

__all__ = [
    "CIVIL_NOON",
    "DEFAULT_TIMEZONE",
    "CivilDate",
    "CivilDateNormalizer",
    "ImagePaths",
]
