# rankcard/renderer.py
import asyncio
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Optional

import jinja2

import config
from helpers.logging_helper import add_throttle, get_logger
from rankcard.assets import AssetRegistry
from rankcard.context import RenderContext
from rankcard.errors import EncodingError, PoolInitError, TemplateError, WorkerLostError
from rankcard.templates import CardTemplates
from rankcard.vector import rasterize
from utility.image_utils import encode_png

log = get_logger("rankcard.renderer")
timing_log = get_logger("rankcard.timing")
add_throttle(timing_log, 60)


class CardRenderer:
    """
    Renders rank cards off the event loop.

    Each call fills the SVG template, draws it with cairo and encodes a
    PNG on a fixed pool of worker threads. Cancelling the awaiting task only
    drops work that has not started; a running render finishes and its result
    is discarded. No timeouts are applied here.
    """

    def __init__(
        self,
        *,
        workers: Optional[int] = None,
        assets: Optional[AssetRegistry] = None,
        templates: Optional[CardTemplates] = None,
    ):
        self.assets = assets or AssetRegistry.default()
        self.templates = templates or CardTemplates.default()
        self.workers = config.RENDER_WORKERS if workers is None else workers
        try:
            self._pool = ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="card-render"
            )
        except (ValueError, TypeError, RuntimeError) as exc:
            raise PoolInitError(
                f"Could not start {self.workers!r} render workers: {exc}"
            ) from exc
        log.info("Card renderer ready with %d worker threads.", self.workers)

    async def render(self, context: RenderContext) -> bytes:
        variables = context.template_vars()
        loop = asyncio.get_running_loop()
        result: asyncio.Future[bytes] = loop.create_future()

        try:
            job = self._pool.submit(self._render_vars, variables)
        except RuntimeError as exc:
            raise WorkerLostError("Render pool is shut down") from exc
        job.add_done_callback(lambda done: _post_result(loop, result, done))

        try:
            return await result
        except asyncio.CancelledError:
            job.cancel()  # no-op once the worker has picked it up
            raise

    def render_sync(self, context: RenderContext) -> bytes:
        """Run the whole pipeline on the calling thread."""
        return self._render_vars(context.template_vars())

    def _render_vars(self, variables: dict[str, Any]) -> bytes:
        started = time.perf_counter()
        try:
            document = self.templates.render_card(variables)
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Could not fill card template: {exc}") from exc
        except (TypeError, ValueError, ArithmeticError) as exc:
            # a context field of the wrong type, or a filter that blew up
            raise TemplateError(f"Bad value while filling card template: {exc!r}") from exc

        canvas = rasterize(document, self.assets)

        try:
            png = encode_png(canvas)
        except (OSError, ValueError) as exc:
            raise EncodingError(f"Could not encode card: {exc}") from exc

        timing_log.debug(
            "Rendered %dx%d card in %.1fms (%d bytes)",
            canvas.width,
            canvas.height,
            (time.perf_counter() - started) * 1000,
            len(png),
        )
        return png

    def close(self, *, wait: bool = True) -> None:
        """Stop the pool. Queued renders are dropped and their callers see WorkerLostError."""
        self._pool.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> "CardRenderer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _post_result(
    loop: asyncio.AbstractEventLoop, result: asyncio.Future, job: Future
) -> None:
    """Runs on the worker (or shutdown) thread; hands exactly one outcome to the loop."""
    if job.cancelled():
        outcome: tuple = (None, WorkerLostError("Render task was dropped before it ran"))
    elif job.exception() is not None:
        outcome = (None, job.exception())
    else:
        outcome = (job.result(), None)

    try:
        loop.call_soon_threadsafe(_settle, result, *outcome)
    except RuntimeError:
        # the caller's loop is gone; nobody is waiting for this card
        log.debug("Dropping render result for a closed event loop")


def _settle(
    result: asyncio.Future, value: Optional[bytes], error: Optional[BaseException]
) -> None:
    if result.done():
        return
    if error is not None:
        result.set_exception(error)
    else:
        result.set_result(value)
