"""Composable instrumentation for public service API methods.

One decorator fans each call out to a set of concerns (logging, tracing,
metrics). Concern failures are isolated so instrumentation can never change
the outcome of the wrapped call.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass
from functools import lru_cache, wraps
from time import perf_counter
from typing import Any, Callable, Mapping, Protocol, Sequence

from opentelemetry import metrics as otel_metrics
from opentelemetry import trace as otel_trace
from opentelemetry.trace import Span, Status, StatusCode

from packages.portal_shared.config import load_settings

from . import fields
from .context import log_context


@dataclass(frozen=True)
class InvocationContext:
    """Structured metadata describing one public API invocation."""

    component_id: str
    api_name: str
    trace_id: str | None
    envelope_id: str | None
    principal: str | None
    references: Mapping[str, str]


@dataclass(frozen=True)
class CompletionContext:
    """Structured metadata describing one completed public API invocation."""

    invocation: InvocationContext
    success: bool
    duration_ms: float
    errors: list[str]
    error_categories: list[str]
    decision: str | None = None


class PublicApiInstrumentationConcern(Protocol):
    """Hook contract for one public API instrumentation concern."""

    def on_invocation(self, context: InvocationContext) -> None:
        """Handle invocation-start event for one method call."""

    def on_completion(self, context: CompletionContext) -> None:
        """Handle completion event for one method call."""


class PublicApiLoggingConcern:
    """Emit one structured log line at invocation and one at completion."""

    def __init__(self, *, logger: Any) -> None:
        self._logger = logger

    def on_invocation(self, context: InvocationContext) -> None:
        with log_context(_invocation_log_context(context)):
            self._logger.info("Public API invocation")

    def on_completion(self, context: CompletionContext) -> None:
        payload = _invocation_log_context(context.invocation)
        payload.update(
            {
                fields.EVENT: fields.PUBLIC_API_COMPLETION_EVENT,
                fields.SUCCESS: context.success,
                fields.DURATION_MS: context.duration_ms,
                fields.ERRORS: context.errors,
                fields.DECISION: context.decision,
            }
        )
        with log_context(payload):
            if context.success:
                self._logger.info("Public API completion")
            else:
                self._logger.warning("Public API completion")


class _CounterLike(Protocol):
    def add(self, amount: int | float, attributes: Mapping[str, str]) -> None: ...


class _HistogramLike(Protocol):
    def record(self, amount: float, attributes: Mapping[str, str]) -> None: ...


class _TracerLike(Protocol):
    def start_span(self, name: str) -> Span: ...


class PublicApiTracingConcern:
    """Open one span per invocation and close it on completion."""

    def __init__(self, *, tracer: _TracerLike) -> None:
        self._tracer = tracer
        self._active_spans: ContextVar[tuple[Span, ...]] = ContextVar(
            "public_api_active_spans", default=()
        )

    def on_invocation(self, context: InvocationContext) -> None:
        span = self._tracer.start_span(
            f"public_api.{context.component_id}.{context.api_name}"
        )
        span.set_attribute(fields.COMPONENT_ID, context.component_id)
        span.set_attribute(fields.API_NAME, context.api_name)
        for key, value in (
            (fields.TRACE_ID, context.trace_id),
            (fields.ENVELOPE_ID, context.envelope_id),
            (fields.PRINCIPAL, context.principal),
        ):
            if value is not None:
                span.set_attribute(key, value)
        for key, value in context.references.items():
            span.set_attribute(f"reference.{key}", value)
        self._active_spans.set((*self._active_spans.get(), span))

    def on_completion(self, context: CompletionContext) -> None:
        current = self._active_spans.get()
        if not current:
            return
        span = current[-1]
        self._active_spans.set(current[:-1])

        span.set_attribute(fields.SUCCESS, context.success)
        span.set_attribute(fields.DURATION_MS, context.duration_ms)
        span.set_attribute("errors.count", len(context.errors))
        if context.decision is not None:
            span.set_attribute(fields.DECISION, context.decision)
        if not context.success:
            span.set_status(Status(StatusCode.ERROR, "; ".join(context.errors[:3])))
        span.end()


class PublicApiMetricsConcern:
    """Emit call, latency, error and decision instruments on completion."""

    def __init__(
        self,
        *,
        calls_total: _CounterLike,
        duration_ms: _HistogramLike,
        errors_total: _CounterLike,
        decisions_total: _CounterLike,
    ) -> None:
        self._calls_total = calls_total
        self._duration_ms = duration_ms
        self._errors_total = errors_total
        self._decisions_total = decisions_total

    def on_invocation(self, context: InvocationContext) -> None:
        del context

    def on_completion(self, context: CompletionContext) -> None:
        attrs = {
            fields.COMPONENT_ID: context.invocation.component_id,
            fields.API_NAME: context.invocation.api_name,
            fields.OUTCOME: "success" if context.success else "failure",
        }
        self._calls_total.add(1, attributes=attrs)
        self._duration_ms.record(context.duration_ms, attributes=attrs)

        if context.decision is not None:
            self._decisions_total.add(
                1,
                attributes={
                    fields.COMPONENT_ID: context.invocation.component_id,
                    fields.DECISION: context.decision,
                },
            )

        if context.success:
            return
        for category in context.error_categories or ["unknown"]:
            self._errors_total.add(
                1,
                attributes={
                    fields.COMPONENT_ID: context.invocation.component_id,
                    fields.API_NAME: context.invocation.api_name,
                    fields.ERROR_CATEGORY: category,
                },
            )


def public_api_instrumented(
    *,
    component_id: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
    concerns: Sequence[PublicApiInstrumentationConcern] | None = None,
    logger: Any | None = None,
    with_default_concerns: bool = True,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate one public API method with composable instrumentation concerns.

    ``id_fields`` names keyword arguments copied into the invocation
    references so logs and spans carry the identifiers a call acted on.
    """
    resolved: tuple[PublicApiInstrumentationConcern, ...] = tuple(concerns or ())
    if with_default_concerns:
        resolved = (
            *resolved,
            _default_tracing_concern(),
            _default_metrics_concern(),
        )
    if logger is not None:
        resolved = (PublicApiLoggingConcern(logger=logger), *resolved)
    if not resolved:
        raise ValueError("public_api_instrumented requires at least one concern")

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        method_name = api_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            meta = kwargs.get("meta")
            invocation = InvocationContext(
                component_id=component_id,
                api_name=method_name,
                trace_id=_attr_or_none(meta, "trace_id"),
                envelope_id=_attr_or_none(meta, "envelope_id"),
                principal=_attr_or_none(meta, "principal"),
                references={
                    name: str(kwargs[name])
                    for name in id_fields
                    if kwargs.get(name) not in (None, "")
                },
            )
            _dispatch(resolved, "invocation", invocation, logger, invocation)

            started = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                completion = CompletionContext(
                    invocation=invocation,
                    success=False,
                    duration_ms=_elapsed_ms(started),
                    errors=[f"{type(exc).__name__}: {exc}"],
                    error_categories=["internal"],
                )
                _dispatch(resolved, "completion", completion, logger, invocation)
                raise

            success, errors = _result_summary(result)
            completion = CompletionContext(
                invocation=invocation,
                success=success,
                duration_ms=_elapsed_ms(started),
                errors=errors,
                error_categories=_result_error_categories(result),
                decision=_result_decision(result),
            )
            _dispatch(resolved, "completion", completion, logger, invocation)
            return result

        return wrapper

    return decorator


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000.0, 3)


def _attr_or_none(obj: object | None, name: str) -> str | None:
    if obj is None:
        return None
    value = getattr(obj, name, None)
    if value in (None, ""):
        return None
    return str(value)


def _result_summary(result: object) -> tuple[bool, list[str]]:
    """Infer success and one-line error summaries from an envelope-like result."""
    errors = []
    for item in getattr(result, "errors", None) or []:
        message = getattr(item, "message", None)
        if message in (None, ""):
            continue
        code = getattr(item, "code", None)
        errors.append(str(message) if code in (None, "") else f"{code}: {message}")
    ok_value = getattr(result, "ok", None)
    if isinstance(ok_value, bool):
        return ok_value, errors
    return not errors, errors


def _result_error_categories(result: object) -> list[str]:
    categories: list[str] = []
    for item in getattr(result, "errors", None) or []:
        raw = getattr(item, "category", None)
        category = getattr(raw, "value", raw)
        if category not in (None, ""):
            categories.append(str(category))
    return categories


def _result_decision(result: object) -> str | None:
    """Return the ``kind`` tag of a tagged-union payload value, if any."""
    payload = getattr(result, "payload", None)
    value = getattr(payload, "value", None)
    kind = getattr(value, "kind", None)
    return kind if isinstance(kind, str) else None


def _invocation_log_context(context: InvocationContext) -> dict[str, object]:
    return {
        fields.EVENT: fields.PUBLIC_API_INVOCATION_EVENT,
        fields.COMPONENT_ID: context.component_id,
        fields.API_NAME: context.api_name,
        fields.TRACE_ID: context.trace_id,
        fields.ENVELOPE_ID: context.envelope_id,
        fields.PRINCIPAL: context.principal,
        **context.references,
    }


def _dispatch(
    concerns: Sequence[PublicApiInstrumentationConcern],
    stage: str,
    context: InvocationContext | CompletionContext,
    logger: Any | None,
    invocation: InvocationContext,
) -> None:
    """Deliver one event to every concern, isolating concern failures."""
    for concern in concerns:
        try:
            if stage == "invocation":
                concern.on_invocation(context)  # type: ignore[arg-type]
            else:
                concern.on_completion(context)  # type: ignore[arg-type]
        except Exception as exc:  # noqa: BLE001
            _report_concern_failure(
                logger=logger,
                stage=stage,
                concern=type(concern).__name__,
                exc=exc,
                invocation=invocation,
            )


def _report_concern_failure(
    *,
    logger: Any | None,
    stage: str,
    concern: str,
    exc: Exception,
    invocation: InvocationContext,
) -> None:
    if logger is not None:
        with log_context(
            {
                fields.EVENT: fields.PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT,
                fields.COMPONENT_ID: invocation.component_id,
                fields.API_NAME: invocation.api_name,
                fields.STAGE: stage,
                fields.CONCERN: concern,
                fields.ERRORS: [f"{type(exc).__name__}: {exc}"],
            }
        ):
            logger.warning("Public API instrumentation concern failed")
    _instruments().instrumentation_failures_total.add(
        1,
        attributes={
            fields.COMPONENT_ID: invocation.component_id,
            fields.API_NAME: invocation.api_name,
            fields.STAGE: stage,
            fields.CONCERN: concern,
        },
    )


@dataclass(frozen=True)
class _OtelInstruments:
    calls_total: _CounterLike
    duration_ms: _HistogramLike
    errors_total: _CounterLike
    decisions_total: _CounterLike
    instrumentation_failures_total: _CounterLike


@lru_cache(maxsize=1)
def _instruments() -> _OtelInstruments:
    """Create OTel metric instruments named from observability settings."""
    names = load_settings().observability.public_api.otel
    meter = otel_metrics.get_meter(names.meter_name)
    return _OtelInstruments(
        calls_total=meter.create_counter(
            name=names.metric_public_api_calls_total,
            description="Count of public API invocations by component/method/outcome.",
            unit="1",
        ),
        duration_ms=meter.create_histogram(
            name=names.metric_public_api_duration_ms,
            description="Public API invocation latency in milliseconds.",
            unit="ms",
        ),
        errors_total=meter.create_counter(
            name=names.metric_public_api_errors_total,
            description="Count of public API failures by error category.",
            unit="1",
        ),
        decisions_total=meter.create_counter(
            name=names.metric_validation_decisions_total,
            description="Count of validation decisions by outcome kind.",
            unit="1",
        ),
        instrumentation_failures_total=meter.create_counter(
            name=names.metric_instrumentation_failures_total,
            description="Count of instrumentation concern failures.",
            unit="1",
        ),
    )


@lru_cache(maxsize=1)
def _default_tracing_concern() -> PublicApiTracingConcern:
    names = load_settings().observability.public_api.otel
    return PublicApiTracingConcern(tracer=otel_trace.get_tracer(names.tracer_name))


@lru_cache(maxsize=1)
def _default_metrics_concern() -> PublicApiMetricsConcern:
    instruments = _instruments()
    return PublicApiMetricsConcern(
        calls_total=instruments.calls_total,
        duration_ms=instruments.duration_ms,
        errors_total=instruments.errors_total,
        decisions_total=instruments.decisions_total,
    )
