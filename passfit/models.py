"""
Lazily-initialized model services

Each ModelService owns one inference backend (a rembg session, a MediaPipe
detector, ...). The backend is loaded at most once per service; callers that
arrive while it is loading wait on the same future. Inference calls are
serialized per service.
"""

import gc
import logging
import threading
from concurrent.futures import Future
from enum import Enum
from typing import Any, Callable, Optional

from .errors import ModelUnavailable, PassfitError

logger = logging.getLogger(__name__)


class ModelState(Enum):
    UNINITIALIZED = 'uninitialized'
    LOADING = 'loading'
    READY = 'ready'
    FAILED = 'failed'


class ModelService:
    """Initialize-once holder for an inference backend.

    Usage:
        service = ModelService('rembg', lambda: new_session('u2net_human_seg'))
        mask = service.run(lambda session, img: session.predict(img), image)
    """

    def __init__(
        self,
        name: str,
        loader: Callable[[], Any],
        closer: Optional[Callable[[Any], None]] = None,
    ):
        self._name = name
        self._loader = loader
        self._closer = closer
        self._lock = threading.Lock()
        self._inference_lock = threading.Lock()
        self._future: Optional[Future] = None
        self._load_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def load_count(self) -> int:
        return self._load_count

    @property
    def state(self) -> ModelState:
        with self._lock:
            future = self._future
        if future is None:
            return ModelState.UNINITIALIZED
        if not future.done():
            return ModelState.LOADING
        if future.exception() is not None:
            return ModelState.FAILED
        return ModelState.READY

    def get(self) -> Any:
        """Return the loaded backend, loading it on first call.

        Raises:
            ModelUnavailable: If loading failed (now or on an earlier call).
        """
        with self._lock:
            future = self._future
            owner = future is None
            if owner:
                future = Future()
                self._future = future
                self._load_count += 1

        if owner:
            logger.info(f"Loading model: {self._name}")
            try:
                model = self._loader()
            except Exception as e:
                logger.error(f"Failed to load model {self._name}: {e}")
                if isinstance(e, ModelUnavailable):
                    error = e
                else:
                    error = ModelUnavailable(f"Cannot initialize {self._name}: {e}")
                    error.__cause__ = e
                future.set_exception(error)
            except BaseException as e:
                logger.error(f"Loading {self._name} was interrupted: {e!r}")
                future.set_exception(ModelUnavailable(f"Loading {self._name} was interrupted"))
                raise
            else:
                logger.info(f"Model ready: {self._name}")
                future.set_result(model)

        return future.result()

    def run(self, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Call fn(model, *args, **kwargs) with at most one call in flight.

        Raises:
            ModelUnavailable: If the backend cannot be loaded or fn raises.
        """
        model = self.get()
        with self._inference_lock:
            try:
                return fn(model, *args, **kwargs)
            except PassfitError:
                raise
            except Exception as e:
                logger.error(f"{self._name} inference failed: {e}")
                raise ModelUnavailable(f"{self._name} inference failed: {e}") from e

    def reset(self) -> None:
        """Forget the loaded (or failed) backend so the next get() loads again.

        A load in progress is waited for and its result closed, so a backend
        is never left behind on a forgotten future.
        """
        with self._lock:
            future = self._future
        if future is None:
            return
        if not future.done():
            logger.info(f"Waiting for {self._name} to finish loading before reset")
        error = future.exception()

        with self._lock:
            owner = self._future is future
            if owner:
                self._future = None
        if owner and error is None and self._closer is not None:
            try:
                self._closer(future.result())
            except Exception as e:
                logger.warning(f"Failed to close {self._name}: {e}")

    def close(self) -> None:
        """Release the backend and any GPU memory it held."""
        self.reset()
        _clear_gpu_memory()


def _clear_gpu_memory() -> None:
    gc.collect()
    try:
        import torch
        if torch.cuda.is_available():
            torch.cuda.empty_cache()
            logger.info("GPU memory cleared")
    except ImportError:
        pass
    except Exception as e:
        logger.warning(f"Failed to clear GPU memory: {e}")
