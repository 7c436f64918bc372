"""Custom exceptions for the slideshow engine and its service layer."""


class SlideshowError(Exception):
    """Base class for every error raised by the slideshow generator."""


class PreconditionError(SlideshowError):
    """Raised before a run starts: offline backend or empty item selection."""


class GenerationInProgressError(PreconditionError):
    """Raised when ``generate()`` is called while another run is in flight."""


class AssetDownloadError(SlideshowError):
    """Raised when downloading or reading an external asset (e.g., image) fails."""


class SurfaceError(SlideshowError):
    """Raised when a drawing surface cannot be allocated."""


class EncodingError(SlideshowError):
    """Raised when the capture/encode session cannot start or produces no data."""


class RenderError(SlideshowError):
    """Raised when rendering fails in the rendering pipeline."""


class CatalogError(SlideshowError):
    """Raised when fetching the product catalog fails."""


class GenerationCancelled(SlideshowError):
    """Raised when a run is cancelled through its cancellation token."""
