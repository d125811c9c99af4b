"""Validation Engine — loads the document once and dispatches the validators.

This is the main entry point for workflow validation. A run moves through
IDLE -> LOADING -> DISPATCHING -> COLLECTING -> DONE and always ends in a
RunSummary: operational failures become a single fatal finding instead of
escaping to the caller.

Usage:
    engine = ValidationEngine()
    summary = engine.run("workflow.json")
    if not summary.success:
        # summary.errors > 0
"""

import shutil
import time
from concurrent.futures import ThreadPoolExecutor, wait
from enum import Enum
from typing import Iterable, Optional

import structlog

from flowguard.config import Settings, get_settings
from flowguard.document import WorkflowDocument, load_document
from flowguard.errors import ConfigurationError, DependencyError, FlowguardError, RunTimeoutError
from flowguard.services.artifact_cache import ArtifactCache
from flowguard.validators.base import BaseValidator
from flowguard.validators.models import (
    Category,
    Finding,
    RunSummary,
    Severity,
    ValidatorKind,
    ValidatorTiming,
)
from flowguard.validators.patterns import PatternLibrary, default_library
from flowguard.validators.registry import REQUIRED_TOOLS, VALIDATOR_REGISTRY

logger = structlog.get_logger()

ENGINE_NAME = "ValidationEngine"


class EngineState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    DISPATCHING = "dispatching"
    COLLECTING = "collecting"
    DONE = "done"


class ValidationEngine:
    """Runs the enabled validators against one workflow document.

    Design principles:
        - Deterministic: parallel and sequential runs produce identical summaries
        - Isolated: a crashing validator becomes one error finding
        - Single load: the document and derived data are shared through one cache
        - Observable: logs every run with per-validator timing
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[dict[ValidatorKind, type[BaseValidator]]] = None,
        patterns: Optional[PatternLibrary] = None,
        verbose: bool = False,
    ):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else VALIDATOR_REGISTRY
        self.patterns = patterns or default_library
        self.verbose = verbose
        self.state = EngineState.IDLE
        self.cache: Optional[ArtifactCache] = None

    def run(
        self,
        path: str,
        kinds: Optional[Iterable[ValidatorKind]] = None,
        parallel: bool = True,
        timeout: Optional[float] = None,
    ) -> RunSummary:
        """Validate the workflow file at `path`.

        Args:
            path: Workflow JSON file
            kinds: Validators to run (default: all registered)
            parallel: Allow the thread pool when enough validators are enabled
            timeout: Overall time budget in seconds (default: RUN_TIMEOUT_SECONDS)

        Returns:
            RunSummary with sorted findings, counts and timings
        """
        start_time = time.perf_counter()
        timeout = timeout if timeout is not None else self.settings.RUN_TIMEOUT_SECONDS
        validators = self._select(kinds)
        self.cache = ArtifactCache()

        try:
            self.state = EngineState.LOADING
            self._check_settings()
            self._check_dependencies(validators)

            load_start = time.perf_counter()
            document = load_document(path, self.cache)
            timings = [ValidatorTiming(name="DocumentLoad", duration_ms=_elapsed_ms(load_start))]

            self.state = EngineState.DISPATCHING
            deadline = start_time + timeout if timeout else None
            results = self._dispatch(validators, document, parallel, deadline, timeout)
        except FlowguardError as e:
            logger.error("validation_aborted", path=path, error=str(e), state=self.state.value)
            self.state = EngineState.DONE
            return RunSummary.fatal(self._fatal_finding(e), total_ms=_elapsed_ms(start_time))

        self.state = EngineState.COLLECTING
        findings: list[Finding] = []
        for validator, (validator_findings, duration_ms) in zip(validators, results):
            findings.extend(validator_findings)
            timings.append(ValidatorTiming(name=validator.name, duration_ms=duration_ms))

        summary = RunSummary.build(findings, timings=timings, total_ms=_elapsed_ms(start_time))
        self.state = EngineState.DONE

        logger.debug("cache_stats", **self.cache.stats())
        logger.info(
            "validation_complete",
            path=path,
            success=summary.success,
            counts=summary.counts,
            validators=len(validators),
            duration_ms=summary.total_ms,
            validator_timings={t.name: t.duration_ms for t in summary.timings},
        )
        return summary

    # ── Loading ──

    def _select(self, kinds: Optional[Iterable[ValidatorKind]]) -> list[BaseValidator]:
        """Instantiate the enabled validators in registration order."""
        enabled = set(kinds) if kinds is not None else set(self.registry)
        return [
            cls(settings=self.settings, verbose=self.verbose)
            for kind, cls in self.registry.items()
            if kind in enabled
        ]

    def _check_settings(self) -> None:
        s = self.settings
        if s.SIZE_SOFT_LIMIT > s.SIZE_HARD_LIMIT:
            raise ConfigurationError(
                f"SIZE_SOFT_LIMIT ({s.SIZE_SOFT_LIMIT}) exceeds SIZE_HARD_LIMIT ({s.SIZE_HARD_LIMIT})",
                setting="SIZE_SOFT_LIMIT",
            )
        if s.NODE_COUNT_WARNING > s.NODE_COUNT_ERROR:
            raise ConfigurationError(
                f"NODE_COUNT_WARNING ({s.NODE_COUNT_WARNING}) exceeds NODE_COUNT_ERROR ({s.NODE_COUNT_ERROR})",
                setting="NODE_COUNT_WARNING",
            )
        if s.MAX_WORKERS < 1:
            raise ConfigurationError("MAX_WORKERS must be at least 1", setting="MAX_WORKERS")

    def _check_dependencies(self, validators: list[BaseValidator]) -> None:
        missing = sorted({
            tool
            for validator in validators
            for tool in REQUIRED_TOOLS.get(validator.kind, ())
            if shutil.which(tool) is None
        })
        if missing:
            raise DependencyError(f"Missing required tools: {', '.join(missing)}", missing=missing)

    # ── Dispatching ──

    def _dispatch(
        self,
        validators: list[BaseValidator],
        document: WorkflowDocument,
        parallel: bool,
        deadline: Optional[float],
        timeout: Optional[float],
    ) -> list[tuple[list[Finding], float]]:
        """Run validators and return their results in registration order."""
        use_pool = parallel and len(validators) > self.settings.PARALLEL_THRESHOLD
        logger.debug("dispatch_started", validators=len(validators), parallel=use_pool)

        if not use_pool:
            results = []
            for validator in validators:
                results.append(self._run_one(validator, document))
                if deadline is not None and time.perf_counter() > deadline:
                    raise RunTimeoutError(f"Validation exceeded {timeout}s", timeout_seconds=timeout)
            return results

        executor = ThreadPoolExecutor(max_workers=self.settings.MAX_WORKERS, thread_name_prefix="flowguard")
        try:
            futures = [executor.submit(self._run_one, v, document) for v in validators]
            remaining = max(0.0, deadline - time.perf_counter()) if deadline is not None else None
            _, pending = wait(futures, timeout=remaining)
            if pending:
                raise RunTimeoutError(f"Validation exceeded {timeout}s", timeout_seconds=timeout)
            return [f.result() for f in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _run_one(self, validator: BaseValidator, document: WorkflowDocument) -> tuple[list[Finding], float]:
        v_start = time.perf_counter()
        try:
            findings = list(validator.evaluate(document, self.cache, self.patterns))
        except Exception as e:
            logger.error(
                "validator_failed",
                validator=validator.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            # One broken validator must not kill the run
            findings = [Finding(
                category=validator.category,
                severity=Severity.ERROR,
                message=f"Validator '{validator.name}' crashed: {e}",
                detail=type(e).__name__,
                source_validator=validator.name,
            )]
        return findings, _elapsed_ms(v_start)

    @staticmethod
    def _fatal_finding(error: FlowguardError) -> Finding:
        return Finding(
            category=Category.STRUCTURE,
            severity=Severity.ERROR,
            message=error.message,
            detail=error.code,
            source_validator=ENGINE_NAME,
        )


def _elapsed_ms(since: float) -> float:
    return round((time.perf_counter() - since) * 1000, 3)
