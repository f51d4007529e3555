"""Usage and cost tracking for model calls.

Every call to the model provider is recorded as one ``ModelCallLog`` and
written as a single structured log line. Every request logs a summary of its
calls (document: OCR, chunks, single-shot analysis; scan; voice query), which
also drops them. Only the most recent ``max_logs`` calls are retained.

Usage:
    from core.cost_tracker import CostTracker, ExecutionStatus

    tracker = CostTracker()
    log = tracker.create_log(
        operation="CHUNK_ANALYSIS",
        reference_id="3f0c...:chunk-2",
        model="gpt-4o",
        input_tokens=12400,
        output_tokens=1800,
        execution_time_ms=9150,
        status=ExecutionStatus.SUCCESS,
    )
    tracker.log_execution(log)
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ExecutionStatus(str, Enum):
    """Status of a model call."""
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class ModelPricing(Enum):
    """Pricing per model (USD per 1M tokens)."""
    GPT_4O_MINI = {"input": 0.15, "output": 0.6}
    GPT_4O = {"input": 2.5, "output": 10.0}
    GEMINI_FLASH = {"input": 0.3, "output": 2.5}
    GEMINI_PRO = {"input": 1.25, "output": 10.0}

    @classmethod
    def get_pricing(cls, model_name: str) -> dict[str, float]:
        """Get pricing for a model by name; unknown models use gpt-4o-mini rates."""
        name = model_name.lower()
        if "gemini" in name:
            return (cls.GEMINI_PRO if "pro" in name else cls.GEMINI_FLASH).value
        if "gpt-4o-mini" in name:
            return cls.GPT_4O_MINI.value
        if "gpt-4o" in name:
            return cls.GPT_4O.value
        return cls.GPT_4O_MINI.value


@dataclass
class ModelCallLog:
    """Log entry for a single model call."""
    timestamp: datetime
    operation: str
    reference_id: str
    model: str
    input_tokens: int
    output_tokens: int
    execution_time_ms: int
    cost_usd: float
    status: ExecutionStatus
    extra_data: dict[str, Any] = field(default_factory=dict)
    error_message: str | None = None
    retry_count: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def to_log_string(self) -> str:
        """Format as a standardized log string."""
        extra_parts = " | ".join(f"{k}={v}" for k, v in self.extra_data.items())
        base = (
            f"{self.operation} | {self.reference_id} | model={self.model} | "
            f"input_tokens={self.input_tokens} | output_tokens={self.output_tokens} | "
            f"execution_time_ms={self.execution_time_ms} | "
            f"cost_usd={self.cost_usd:.5f} | status={self.status.value}"
        )
        if self.retry_count:
            base += f" | retries={self.retry_count}"
        if extra_parts:
            base += f" | {extra_parts}"
        if self.error_message:
            base += f" | error={self.error_message}"
        return base


@dataclass
class UsageSummary:
    """Aggregate of the calls made for one reference (a document, a scan)."""
    reference_id: str
    total_calls: int
    failed_calls: int
    total_input_tokens: int
    total_output_tokens: int
    total_cost_usd: float
    total_execution_time_ms: int

    def to_log_string(self) -> str:
        return (
            f"USAGE_SUMMARY | {self.reference_id} | calls={self.total_calls} | "
            f"failed={self.failed_calls} | input_tokens={self.total_input_tokens} | "
            f"output_tokens={self.total_output_tokens} | "
            f"cost_usd={self.total_cost_usd:.5f} | "
            f"execution_time_ms={self.total_execution_time_ms}"
        )


class CostTracker:
    """Records model calls and logs them through a named logger."""

    def __init__(self, logger_name: str = "aurora.usage", max_logs: int = 1000) -> None:
        self.logger = logging.getLogger(logger_name)
        self.max_logs = max_logs
        self._logs: deque[ModelCallLog] = deque(maxlen=max_logs)
        self._lock = threading.Lock()

    def calculate_cost(self, model: str, input_tokens: int, output_tokens: int) -> float:
        """Calculate cost in USD for a given model and token usage."""
        pricing = ModelPricing.get_pricing(model)
        return (input_tokens * pricing["input"] + output_tokens * pricing["output"]) / 1_000_000

    def create_log(
        self,
        operation: str,
        reference_id: str,
        model: str,
        input_tokens: int,
        output_tokens: int,
        execution_time_ms: int,
        status: str | ExecutionStatus,
        extra_data: dict[str, Any] | None = None,
        error_message: str | None = None,
        retry_count: int = 0,
    ) -> ModelCallLog:
        """Create a model call log entry."""
        if isinstance(status, str):
            status = ExecutionStatus(status)

        return ModelCallLog(
            timestamp=datetime.now(timezone.utc),
            operation=operation,
            reference_id=reference_id,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            execution_time_ms=execution_time_ms,
            cost_usd=self.calculate_cost(model, input_tokens, output_tokens),
            status=status,
            extra_data=extra_data or {},
            error_message=error_message,
            retry_count=retry_count,
        )

    def log_execution(self, log: ModelCallLog) -> None:
        """Store a call and write it to the log."""
        with self._lock:
            self._logs.append(log)
        log_level = logging.INFO if log.status == ExecutionStatus.SUCCESS else logging.WARNING
        self.logger.log(log_level, log.to_log_string())

    def get_summary(self, reference_prefix: str) -> UsageSummary:
        """Summarize all calls whose reference id starts with ``reference_prefix``."""
        with self._lock:
            logs = [log for log in self._logs if log.reference_id.startswith(reference_prefix)]
        return UsageSummary(
            reference_id=reference_prefix,
            total_calls=len(logs),
            failed_calls=sum(1 for log in logs if log.status == ExecutionStatus.FAILURE),
            total_input_tokens=sum(log.input_tokens for log in logs),
            total_output_tokens=sum(log.output_tokens for log in logs),
            total_cost_usd=sum(log.cost_usd for log in logs),
            total_execution_time_ms=sum(log.execution_time_ms for log in logs),
        )

    def log_summary(self, reference_prefix: str) -> UsageSummary:
        """Log and drop the calls for one reference."""
        summary = self.get_summary(reference_prefix)
        self.logger.info(summary.to_log_string())
        with self._lock:
            self._logs = deque(
                (log for log in self._logs if not log.reference_id.startswith(reference_prefix)),
                maxlen=self.max_logs,
            )
        return summary

    def get_all_logs(self) -> list[ModelCallLog]:
        with self._lock:
            return list(self._logs)

    def reset(self) -> None:
        """Clear all accumulated logs."""
        with self._lock:
            self._logs.clear()


# Global cost tracker instance
cost_tracker = CostTracker()
