# rankcard/errors.py


class RenderError(Exception):
    """Base class for everything that can go wrong while producing a card."""


class TemplateError(RenderError):
    """The context could not fill the card template."""


class VectorError(RenderError):
    """The filled template is not an SVG document we can draw."""


class BufferAllocationError(RenderError):
    """The pixel buffer could not be sized or allocated."""


class EncodingError(RenderError):
    """The finished image could not be encoded."""


class WorkerLostError(RenderError):
    """The render task was dropped before it posted a result."""


class PoolInitError(RenderError):
    """The render worker pool could not be created. Fatal at startup."""
