"""
pbxdeps/diagnostics.py
======================
진단 싱크

조회 중 발생하는 "찾을 수 없음" 류의 문제는 예외 대신 싱크로 보고된다.
전역 로거 상태를 건드리지 않도록 싱크를 생성자와 조회 경로에 명시적으로 전달한다.

- LoggingSink: 표준 logging 로거로 전달 (최소 레벨 필터)
- MemorySink: 기록을 메모리에 수집 (리포터/테스트용)
"""

import logging
import threading
from typing import List, Optional, Protocol

from .models import NOTICE, TRACE, Diagnostic, LogLevel


def register_levels():
    """TRACE / NOTICE 레벨 이름을 logging에 등록"""
    logging.addLevelName(TRACE, "TRACE")
    logging.addLevelName(NOTICE, "NOTICE")


class DiagnosticsSink(Protocol):
    """record(severity, message)만 요구하는 싱크 인터페이스"""

    def record(self, severity: LogLevel, message: str) -> None:
        ...


class LoggingSink:
    """
    logging 로거로 진단을 전달하는 싱크

    min_level은 진단의 "관찰 가능 여부"만 결정한다. record 호출 자체는
    레벨과 무관하게 항상 일어난다.
    """

    def __init__(
        self,
        min_level: LogLevel = LogLevel.INFO,
        logger: Optional[logging.Logger] = None
    ):
        self.min_level = min_level
        self.logger = logger or logging.getLogger("pbxdeps")
        register_levels()

    def record(self, severity: LogLevel, message: str) -> None:
        if severity < self.min_level:
            return
        self.logger.log(severity.logging_level, message)


class MemorySink:
    """진단을 수집하는 싱크"""

    def __init__(self, min_level: LogLevel = LogLevel.TRACE):
        self.min_level = min_level
        self._records: List[Diagnostic] = []
        self._lock = threading.Lock()

    def record(self, severity: LogLevel, message: str) -> None:
        if severity < self.min_level:
            return
        with self._lock:
            self._records.append(Diagnostic(severity=severity, message=message))

    @property
    def records(self) -> List[Diagnostic]:
        with self._lock:
            return list(self._records)

    def at_least(self, severity: LogLevel) -> List[Diagnostic]:
        """severity 이상의 기록만"""
        return [d for d in self.records if d.severity >= severity]

    def clear(self):
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        return len(self.records)


class TeeSink:
    """여러 싱크에 동시에 기록"""

    def __init__(self, *sinks: DiagnosticsSink):
        self.sinks = sinks

    def record(self, severity: LogLevel, message: str) -> None:
        for sink in self.sinks:
            sink.record(severity, message)


__all__ = [
    'register_levels',
    'DiagnosticsSink',
    'LoggingSink',
    'MemorySink',
    'TeeSink',
]
