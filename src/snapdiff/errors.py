from __future__ import annotations


class SnapdiffError(Exception):
    pass


class ImageDecodeError(SnapdiffError):
    def __init__(self, source: str, reason: str | None = None) -> None:
        self.source = source
        self.reason = reason
        message = f"Could not decode image: {source}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ElementNotFoundError(SnapdiffError):
    def __init__(self, selector: str) -> None:
        self.selector = selector
        super().__init__(f'Element not found for selector "{selector}"')


class MultipleElementsError(SnapdiffError):
    def __init__(self, selector: str, count: int) -> None:
        self.selector = selector
        self.count = count
        super().__init__(
            f'Multiple elements ({count}) found for selector "{selector}" '
            "but need exactly one element"
        )


class ReferenceNotFoundError(SnapdiffError):
    pass
