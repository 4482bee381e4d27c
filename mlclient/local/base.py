"""
Local resource wrapper shared by LocalModel and LocalLogisticRegression.

Responsibilities:
- Accept a resource id (fetched through a Connection on an executor) or a
  pre-fetched finished resource JSON (built synchronously).
- Build the predictive structure once and attach it only when complete.
- Queue predict() calls issued while loading and replay them in order.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Mapping

from mlclient.api.connection import Connection
from mlclient.api.resources import (
    fetch_finished,
    get_resource_id,
    get_resource_type,
    is_finished,
    unwrap,
)
from mlclient.client_logging import bind_resource
from mlclient.config import get_settings
from mlclient.core.exceptions import (
    MalformedResourceError,
    MLClientError,
    ResourceNotReadyError,
)
from mlclient.local.fields import FieldSet, normalize
from mlclient.local.readiness import FAILED, LOADING, READY, Readiness

PredictCallback = Callable[[MLClientError | None, Any], Any]

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()

# executor whose job is running on the current thread, if any
_worker = threading.local()


def _default_executor() -> ThreadPoolExecutor:
    """Shared single-worker pool for resource fetches."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mlclient-fetch")
        return _executor


class LocalResource(ABC):
    """Base for local wrappers; subclasses define payload_key, resource_type, query and _build."""

    payload_key = ""
    resource_type = ""
    query = "limit=-1"

    def __init__(
        self,
        resource: str | dict[str, Any],
        connection: Any = None,
        *,
        executor: Executor | None = None,
    ):
        self.resource_id = get_resource_id(resource)
        if self.resource_id is not None and get_resource_type(self.resource_id) != self.resource_type:
            raise MalformedResourceError(
                f"Cannot build a {type(self).__name__} from this resource: {self.resource_id}"
            )
        self.connection = connection
        self.fields: FieldSet | None = None
        self.objective_id: str | None = None
        self.description: str | None = None
        self.locale: str | None = None
        self._structure: Any = None
        self._readiness = Readiness()
        self._logger = bind_resource(self.resource_id)
        self._executor: Executor | None = None

        if isinstance(resource, dict) and is_finished(resource):
            try:
                self._load(resource)
            except MLClientError as e:
                self._readiness.mark_failed(e)
                raise
            return
        if self.resource_id is None:
            raise MalformedResourceError(
                f"Cannot build a {type(self).__name__}: resource is not finished and has no id"
            )
        if self.connection is None:
            self.connection = Connection()
        self._executor = executor or _default_executor()
        self._executor.submit(self._fetch_and_load)

    # -- loading -------------------------------------------------------

    def _fetch_and_load(self) -> None:
        previous = getattr(_worker, "executor", None)
        _worker.executor = self._executor
        try:
            self._fetch_and_load_inner()
        finally:
            _worker.executor = previous

    def _fetch_and_load_inner(self) -> None:
        settings = get_settings()
        self._logger.info("local_resource_fetch_started", query=self.query)
        try:
            resource = fetch_finished(
                self.connection,
                self.resource_id,
                query=self.query,
                poll_interval=settings.poll_interval,
                max_polls=settings.max_polls,
            )
            self._load(resource)
        except MLClientError as e:
            self._logger.warning("local_resource_failed", error=str(e))
            self._readiness.mark_failed(e)
        except Exception as e:
            self._logger.warning("local_resource_failed", error=str(e), exc_info=True)
            error = MalformedResourceError(f"Cannot build a {type(self).__name__}: {e}")
            error.__cause__ = e
            self._readiness.mark_failed(error)

    def _load(self, resource: dict[str, Any]) -> None:
        payload = unwrap(resource)
        if not isinstance(payload.get(self.payload_key), dict):
            raise MalformedResourceError(
                f"Cannot create the {type(self).__name__} instance. "
                f"Could not find the '{self.payload_key}' key in the resource"
            )
        try:
            objective_id = self._objective_id(payload)
            fields, structure = self._build(payload[self.payload_key], objective_id)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
            raise MalformedResourceError(
                f"Cannot create the {type(self).__name__} instance from this resource: {e!r}"
            ) from e
        self.fields = fields
        self.objective_id = objective_id
        self._structure = structure
        self.description = payload.get("description")
        self.locale = payload.get("locale") or get_settings().default_locale
        self._logger.info("local_resource_ready", fields=len(fields), objective_id=objective_id)
        self._readiness.mark_ready()

    def _objective_id(self, payload: dict[str, Any]) -> str | None:
        inner = payload[self.payload_key]
        objective_fields = payload.get("objective_fields") or inner.get("objective_fields") or []
        objective_id = objective_fields[0] if objective_fields else inner.get("objective_field")
        if objective_id is not None and objective_id not in (inner.get("fields") or {}):
            raise MalformedResourceError(f"Objective field {objective_id} absent from the fields")
        return objective_id

    @abstractmethod
    def _build(self, inner: dict[str, Any], objective_id: str | None) -> tuple[FieldSet, Any]:
        """Return the field set and the predictive structure built from the payload."""

    @abstractmethod
    def _evaluate(self, input_data: dict[str, Any], **options: Any) -> dict[str, Any]:
        """Predict from input already normalized to field ids."""

    # -- state ---------------------------------------------------------

    @property
    def state(self) -> str:
        return self._readiness.state

    @property
    def ready(self) -> bool:
        return self._readiness.state == READY

    @property
    def error(self) -> BaseException | None:
        return self._readiness.error

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the resource is ready or failed; False on timeout."""
        return self._readiness.wait(timeout)

    def on_ready(self, listener: Callable[["LocalResource"], Any]) -> None:
        """Call listener(self) once when ready; never called if loading fails."""
        self._readiness.add_listener(lambda: listener(self))

    # -- prediction ----------------------------------------------------

    def _predict_now(self, input_data: Mapping[Any, Any], options: dict[str, Any]) -> dict[str, Any]:
        if self._readiness.state == FAILED:
            raise self._readiness.error
        normalized = normalize(input_data, self.fields, self.objective_id)
        return self._evaluate(normalized, **options)

    def _run(self, input_data: Mapping[Any, Any], callback: PredictCallback, options: dict[str, Any]) -> Any:
        try:
            result = self._predict_now(input_data, options)
        except MLClientError as e:
            return callback(e, None)
        return callback(None, result)

    def predict(
        self,
        input_data: Mapping[Any, Any],
        callback: PredictCallback | None = None,
        **options: Any,
    ) -> Any:
        """
        Predict from input keyed by field name (or id).

        With a callback, it is called as callback(None, result) or
        callback(error, None); calls made while loading are queued and replayed
        in order once loading settles. Without a callback the result is returned
        (waiting for loading to settle first) and errors are raised.

        A blocking call from a job of the executor that is still to run this
        resource's fetch raises ResourceNotReadyError instead of waiting on it.
        """
        if callback is not None:
            snapshot = dict(input_data)
            if self._readiness.submit(lambda: self._run(snapshot, callback, options)):
                self._logger.debug("local_resource_predict_queued")
                return None
            return self._run(input_data, callback, options)
        if self._readiness.state == LOADING:
            if self._executor is not None and getattr(_worker, "executor", None) is self._executor:
                self._logger.warning("local_resource_blocking_predict_refused")
                raise ResourceNotReadyError(
                    f"{self.resource_id} is still loading on the executor running this call; "
                    "pass a callback or use on_ready()"
                )
            self._readiness.wait()
        return self._predict_now(input_data, options)
