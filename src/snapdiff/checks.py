from __future__ import annotations

import logging
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from snapdiff.capture import ScreenshotSource, capture_element
from snapdiff.config import RegressionConfig
from snapdiff.context import RunContext
from snapdiff.errors import SnapdiffError
from snapdiff.image_diff.compare import compare_images
from snapdiff.image_diff.raster import RasterImage
from snapdiff.image_diff.types import BoundaryRect, ComparisonResult
from snapdiff.storage import ArtifactSink, ReferenceKey, ReferenceStore

logger = logging.getLogger(__name__)


class CheckStatus(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    REFERENCE_CREATED = "reference_created"
    ERRORED = "errored"


class CheckOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: CheckStatus
    identifier: str
    key: ReferenceKey | None = None
    percentage: float | None = None
    regions: tuple[BoundaryRect, ...] = ()
    error: str | None = None

    @property
    def passed(self) -> bool:
        return self.status in (CheckStatus.PASSED, CheckStatus.REFERENCE_CREATED)


def _failure_summary(
    key: ReferenceKey, result: ComparisonResult, context: RunContext
) -> dict[str, object]:
    return {
        "run_id": context.run_id,
        "test_name": key.test_name,
        "identifier": key.identifier,
        "image_name": key.image_name,
        "percentage": result.percentage,
        "raw_composite": result.score.raw_composite,
        "max_difference": result.score.max_difference,
        "area_diff": result.score.area_diff,
        "content_diff": result.score.content_diff,
        "changed_pixels": result.changed_pixels,
        "offset": list(result.offset),
        "width": result.width,
        "height": result.height,
        "reference_width": result.reference_width,
        "reference_height": result.reference_height,
        "candidate_width": result.candidate_width,
        "candidate_height": result.candidate_height,
        "regions": [region.model_dump(mode="json") for region in result.regions],
    }


class VisualRegressionCheck:
    """Compares captured elements of one test against their stored references."""

    def __init__(
        self,
        source: ScreenshotSource,
        store: ReferenceStore,
        sink: ArtifactSink,
        test_name: str,
        config: RegressionConfig | None = None,
        context: RunContext | None = None,
    ) -> None:
        self.source = source
        self.store = store
        self.sink = sink
        self.test_name = test_name
        self.config = config or RegressionConfig()
        self.context = context or RunContext.create()
        self._capture_counter = 0

    def _next_identifier(self) -> str:
        self._capture_counter += 1
        return f"capture_{self._capture_counter:03d}"

    def cleanup(self) -> int:
        """Purge this run's transient captures; returns how many were removed."""
        if not self.config.automatic_cleanup:
            return 0
        removed = self.sink.purge_temporary()
        logger.debug("Purged %d temporary captures", removed, extra={"run_id": self.context.run_id})
        return removed

    def check(self, selector: str = "body", identifier: str | None = None) -> CheckOutcome:
        identifier = identifier or self._next_identifier()
        key: ReferenceKey | None = None
        try:
            candidate = capture_element(self.source, selector, self.config.full_screenshots)
            key = ReferenceKey(
                test_name=self.test_name,
                identifier=identifier,
                viewport=self.source.viewport_size(),
            )
            candidate_png = candidate.to_png_bytes()
            self.sink.write_temporary(key, candidate_png)

            if not self.store.exists(key):
                logger.info(
                    'Generating reference image "%s"',
                    identifier,
                    extra={"test_name": self.test_name, "image_name": key.image_name},
                )
                self.store.save(key, candidate_png)
                return CheckOutcome(
                    status=CheckStatus.REFERENCE_CREATED, identifier=identifier, key=key
                )

            reference = RasterImage.from_bytes(self.store.load(key), source=key.image_name)
            result = compare_images(reference, candidate, config=self.config)
        except SnapdiffError as e:
            logger.exception(
                "Visual check could not run for %s",
                identifier,
                extra={"test_name": self.test_name, "selector": selector},
            )
            return CheckOutcome(
                status=CheckStatus.ERRORED, identifier=identifier, key=key, error=str(e)
            )
        finally:
            self.cleanup()

        if result.passed:
            return CheckOutcome(
                status=CheckStatus.PASSED,
                identifier=identifier,
                key=key,
                percentage=result.percentage,
                regions=result.regions,
            )

        logger.warning(
            'Page content for "%s" differs from reference image: %s%%',
            selector,
            result.percentage,
            extra={
                "test_name": self.test_name,
                "identifier": identifier,
                "raw_composite": result.score.raw_composite,
                "max_difference": self.config.max_difference,
            },
        )
        self.sink.write_failure(
            key, candidate_png, result.diff_png, _failure_summary(key, result, self.context)
        )
        return CheckOutcome(
            status=CheckStatus.FAILED,
            identifier=identifier,
            key=key,
            percentage=result.percentage,
            regions=result.regions,
        )
