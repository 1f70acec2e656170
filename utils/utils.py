"""
Utilities for the x402 payment core
Logging setup, operation timing, JSON reports and integer parsing
"""

import json
import logging
import platform
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import numpy as np
import psutil

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def setup_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """Route all x402 loggers to a log file and stderr"""
    if log_file is None:
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = Path("logs") / f"x402_{stamp}.log"
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # basicConfig is a no-op while the root logger has handlers
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(log_file), logging.StreamHandler()]
    )

    logger.info(f"Logging to {log_file} at level {log_level.upper()}")
    return logger


def parse_big_int(value: Union[str, int]) -> int:
    """Parse a decimal or 0x-prefixed hex string into an int"""
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to an integer")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Cannot convert {type(value).__name__} to an integer")

    text = value.strip()
    # int() also takes digit separators and a plus sign
    if "_" in text or text.startswith("+"):
        raise ValueError(f"Invalid integer literal {value!r}")
    if text[:2] in ("0x", "0X"):
        digits = text[2:]
        if digits[:1] in ("-", "+"):
            raise ValueError(f"Invalid hex literal {value!r}")
        return int(digits, 16)
    return int(text, 10)


# ============================================================================
# OPERATION TIMING
# ============================================================================


@dataclass
class OperationTiming:
    operation: str
    duration_seconds: float
    cpu_percent: float
    rss_mb: float
    started_at: float
    failed: bool = False


class PerformanceMonitor:
    """Wall-clock timings per named operation, sampled with psutil"""

    def __init__(self):
        self.timings: List[OperationTiming] = []
        self._process = psutil.Process()

    def _rss_mb(self) -> float:
        return self._process.memory_info().rss / (1024 * 1024)

    @contextmanager
    def start_operation(self, operation: str) -> Iterator[None]:
        self._process.cpu_percent()
        started_at = time.time()
        start = time.perf_counter()
        failed = False
        try:
            yield
        except BaseException:
            failed = True
            raise
        finally:
            self.timings.append(OperationTiming(
                operation=operation,
                duration_seconds=time.perf_counter() - start,
                cpu_percent=self._process.cpu_percent(),
                rss_mb=self._rss_mb(),
                started_at=started_at,
                failed=failed,
            ))

    def operations(self) -> List[str]:
        return list(dict.fromkeys(t.operation for t in self.timings))

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        """Per-operation statistics keyed by operation name"""
        summary = {}
        for operation in self.operations():
            runs = [t for t in self.timings if t.operation == operation]
            durations = np.array([t.duration_seconds for t in runs])
            total = float(durations.sum())
            summary[operation] = {
                'count': len(runs),
                'failures': sum(t.failed for t in runs),
                'total_seconds': total,
                'mean_seconds': float(durations.mean()),
                'p50_seconds': float(np.percentile(durations, 50)),
                'p95_seconds': float(np.percentile(durations, 95)),
                'peak_rss_mb': max(t.rss_mb for t in runs),
                'ops_per_second': len(runs) / total if total > 0 else 0.0,
            }
        return summary

    def reset(self):
        self.timings = []


def create_performance_report(monitor: PerformanceMonitor) -> str:
    """Fixed-width text table of the monitor summary"""
    summary = monitor.get_summary()
    header = f"{'operation':<32}{'runs':>6}{'mean ms':>12}{'p95 ms':>12}{'ops/s':>10}"

    lines = ["X402 PAYMENT CORE - PERFORMANCE REPORT", header, "-" * len(header)]
    for operation, stats in summary.items():
        lines.append(
            f"{operation:<32}{stats['count']:>6}"
            f"{stats['mean_seconds'] * 1000:>12.3f}{stats['p95_seconds'] * 1000:>12.3f}"
            f"{stats['ops_per_second']:>10.1f}")

    total_runs = sum(stats['count'] for stats in summary.values())
    lines.append(f"{total_runs} operations recorded")
    return "\n".join(lines)


# ============================================================================
# REPORTS
# ============================================================================


def get_system_info() -> Dict[str, Any]:
    return {
        'platform': platform.platform(),
        'python': platform.python_version(),
        'cpus': psutil.cpu_count(logical=True),
        'memory_gb': round(psutil.virtual_memory().total / 1024 ** 3, 2),
    }


def _json_default(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, bytes):
        return obj.hex()
    if isinstance(obj, Path):
        return str(obj)
    raise TypeError(f"{type(obj).__name__} is not JSON serializable")


def save_results(results: Dict[str, Any], filepath: Path):
    """Write results as JSON alongside host metadata"""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    document = {
        'generated_at': datetime.now().isoformat(),
        'system': get_system_info(),
        'data': results,
    }
    with open(filepath, 'w') as f:
        json.dump(document, f, indent=2, default=_json_default)

    logger.info(f"Results saved to {filepath}")


__all__ = [
    'OperationTiming',
    'PerformanceMonitor',
    'setup_logging',
    'parse_big_int',
    'get_system_info',
    'save_results',
    'create_performance_report',
]
