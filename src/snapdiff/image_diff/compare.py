from __future__ import annotations

import logging
from collections.abc import Sequence

from PIL import Image

from snapdiff.config import RegressionConfig

from .alignment import align
from .pixel_diff import diff_pixels
from .raster import RasterImage
from .regions import content_regions, size_regions
from .render import render_diff
from .scoring import score
from .types import ComparisonResult, Offset, RegionKind

logger = logging.getLogger(__name__)

ImageSource = bytes | Image.Image | RasterImage


def _as_raster(source: ImageSource, name: str) -> RasterImage:
    if isinstance(source, RasterImage):
        return source
    if isinstance(source, bytes):
        return RasterImage.from_bytes(source, source=name)
    return RasterImage.from_pil(source, source=name)


def compare_images(
    reference: ImageSource,
    candidate: ImageSource,
    config: RegressionConfig | None = None,
    render: bool = True,
) -> ComparisonResult:
    config = config or RegressionConfig()
    reference_img = _as_raster(reference, "reference")
    candidate_img = _as_raster(candidate, "candidate")

    if config.reposition_image:
        offset = align(
            reference_img,
            candidate_img,
            scale=config.alignment_scale,
            include_alpha=config.include_alpha,
        )
    else:
        offset = Offset()

    difference = diff_pixels(
        reference_img,
        candidate_img,
        offset,
        pixel_threshold=config.pixel_threshold,
        include_alpha=config.include_alpha,
    )
    size_rects = size_regions(difference.canvas_size, difference.overlap)
    result_score = score(
        difference.percentage,
        size_rects,
        difference.canvas_size,
        max_difference=config.max_difference,
    )
    regions = (*content_regions(difference.mask), *size_rects)

    if result_score.raw_composite > 0:
        logger.info(
            "Visual difference detected: %s%%",
            result_score.composite,
            extra={
                "passed": result_score.passed,
                "raw_composite": result_score.raw_composite,
                "max_difference": config.max_difference,
                "area_diff": result_score.area_diff,
                "content_diff": result_score.content_diff,
                "regions": len(regions),
            },
        )

    diff_png: bytes | None = None
    if render and not result_score.passed:
        diff_image = render_diff(
            reference_img,
            candidate_img,
            offset,
            regions,
            colors={
                RegionKind.CONTENT: config.color_content,
                RegionKind.SIZE: config.color_size,
            },
            blend=config.blend,
        )
        diff_png = diff_image.to_png_bytes()

    width, height = difference.canvas_size
    return ComparisonResult(
        percentage=result_score.composite,
        passed=result_score.passed,
        regions=regions,
        offset=offset,
        score=result_score,
        changed_pixels=difference.changed_pixels,
        width=width,
        height=height,
        reference_width=reference_img.width,
        reference_height=reference_img.height,
        candidate_width=candidate_img.width,
        candidate_height=candidate_img.height,
        diff_png=diff_png,
    )


def compare_images_batch(
    pairs: Sequence[tuple[ImageSource, ImageSource]],
    config: RegressionConfig | None = None,
    render: bool = True,
) -> list[ComparisonResult | None]:
    return [
        _compare_single_pair(idx, reference, candidate, config, render)
        for idx, (reference, candidate) in enumerate(pairs)
    ]


def _compare_single_pair(
    idx: int,
    reference: ImageSource,
    candidate: ImageSource,
    config: RegressionConfig | None,
    render: bool,
) -> ComparisonResult | None:
    try:
        return compare_images(reference, candidate, config=config, render=render)
    except Exception:
        logger.exception("Failed to compare image pair %d", idx)
        return None
