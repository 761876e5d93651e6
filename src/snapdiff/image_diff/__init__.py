from .compare import compare_images, compare_images_batch
from .raster import RasterImage
from .types import BoundaryRect, ComparisonResult, Offset, RegionKind, Score

__all__ = (
    "BoundaryRect",
    "ComparisonResult",
    "Offset",
    "RasterImage",
    "RegionKind",
    "Score",
    "compare_images",
    "compare_images_batch",
)
