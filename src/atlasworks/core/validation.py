"""Validation utilities for Atlasworks engine inputs."""

import logging
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """User-friendly validation error.

    This exception is raised when engine input fails validation, before any
    pixel is touched. The message is intended to be displayed directly to
    the user.
    """

    pass


class RasterShapeError(ValidationError):
    """Raster dimensions, channel count or pixel type are not what the engine expects."""

    pass


class InvalidModeError(ValidationError):
    """Alignment mode or ownership policy is not one of the known values."""

    pass


class AlignmentMode(str, Enum):
    """Alignment mode requested by the caller.

    ``icon`` keeps compact parts and centers them; ``silhouette`` separates
    fused silhouettes, keeps taller parts and bottom-aligns them.
    """

    ICON = "icon"
    SILHOUETTE = "silhouette"


class OwnershipPolicy(str, Enum):
    """Acceptance filter applied before cell ownership is decided."""

    ICON = "icon"
    GENERIC = "generic"
    SILHOUETTE = "silhouette"


def validate_raster_shape(pixels: np.ndarray, size: int = 1024) -> None:
    """Validate that a pixel buffer is a ``size`` x ``size`` RGBA raster.

    Args:
        pixels: Pixel array of shape (height, width, channels)
        size: Required width and height

    Raises:
        RasterShapeError: If dimensions or channel count are invalid
    """
    if pixels.ndim != 3:
        raise RasterShapeError(
            f"Input raster must have shape (height, width, channels), got {pixels.shape}"
        )

    height, width, channels = pixels.shape
    if width != size or height != size:
        raise RasterShapeError(f"Input image must be {size}x{size} pixels, got {width}x{height}")

    if channels < 4:
        raise RasterShapeError(f"Input image must have an alpha channel, got {channels} channels")


def validate_alignment_mode(mode: "AlignmentMode | str") -> AlignmentMode:
    """Coerce a mode string into an :class:`AlignmentMode`.

    Args:
        mode: Mode value or its string form ("icon" or "silhouette")

    Returns:
        The matching AlignmentMode

    Raises:
        InvalidModeError: If the mode is not recognized
    """
    try:
        return AlignmentMode(mode)
    except ValueError as e:
        allowed = ", ".join(m.value for m in AlignmentMode)
        raise InvalidModeError(f"Alignment mode must be one of: {allowed} (got {mode!r})") from e


def validate_ownership_policy(policy: "OwnershipPolicy | str") -> OwnershipPolicy:
    """Coerce a policy string into an :class:`OwnershipPolicy`.

    Raises:
        InvalidModeError: If the policy is not recognized
    """
    try:
        return OwnershipPolicy(policy)
    except ValueError as e:
        allowed = ", ".join(p.value for p in OwnershipPolicy)
        raise InvalidModeError(
            f"Ownership policy must be one of: {allowed} (got {policy!r})"
        ) from e
