"""
pbxdeps/models.py
=================
공통 타입 정의

설계 원칙:
- 외부 의존성 없음 (순수 Python 표준 라이브러리만)
- 순환 import 방지 (이 모듈은 다른 모듈을 import하지 않음)
- 생성 이후 불변 (frozen dataclass, 읽기 전용 매핑)
"""

import logging
from enum import Enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Any


# =============================================================================
# 열거형 (Enums)
# =============================================================================

TRACE = 5
NOTICE = 25


class LogLevel(Enum):
    """진단 메시지 심각도 (가장 상세한 것부터)"""
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def logging_level(self) -> int:
        """표준 logging 레벨 값"""
        return _LOGGING_LEVELS[self]

    @classmethod
    def parse(cls, value: str) -> "LogLevel":
        """문자열에서 레벨 파싱 ("warn" 별칭 허용)"""
        key = value.strip().lower()
        if key == "warn":
            key = "warning"
        return cls(key)

    def __ge__(self, other: "LogLevel") -> bool:
        return self.logging_level >= other.logging_level

    def __lt__(self, other: "LogLevel") -> bool:
        return self.logging_level < other.logging_level


_LOGGING_LEVELS: Dict[LogLevel, int] = {
    LogLevel.TRACE: TRACE,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: NOTICE,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


class DependencyKind(Enum):
    """타겟 의존성 종류"""
    NATIVE = "native"    # 같은 프로젝트 생태계에서 빌드되는 타겟
    PACKAGE = "package"  # Swift Package 제품


# =============================================================================
# 프로젝트 모델
# =============================================================================

@dataclass(frozen=True)
class PackageProduct:
    """외부 패키지 제품 (XCSwiftPackageProductDependency)"""
    name: str
    repository_url: Optional[str] = None
    object_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "repository_url": self.repository_url}


@dataclass(frozen=True)
class TargetDependency:
    """
    타겟의 직접 의존성

    kind로 구분되는 두 가지 경우:
    - NATIVE: target_name이 같은 프로젝트의 타겟 이름 (교차 프로젝트 참조면 None)
    - PACKAGE: package가 패키지 제품을 가리킴
    """
    name: str
    kind: DependencyKind
    target_name: Optional[str] = None
    package: Optional[PackageProduct] = None

    @classmethod
    def native(cls, name: str, local: bool = True) -> "TargetDependency":
        return cls(
            name=name,
            kind=DependencyKind.NATIVE,
            target_name=name if local else None,
        )

    @classmethod
    def of_package(cls, package: PackageProduct) -> "TargetDependency":
        return cls(name=package.name, kind=DependencyKind.PACKAGE, package=package)

    def __str__(self) -> str:
        return f"{self.name} ({self.kind.value})"


@dataclass(frozen=True, eq=False)
class NativeTarget:
    """네이티브 빌드 타겟 (PBXNativeTarget)"""
    name: str
    product_ref: Optional[str] = None
    product_type: Optional[str] = None
    object_id: Optional[str] = None
    target_dependencies: Mapping[str, TargetDependency] = field(default_factory=dict)

    def __post_init__(self):
        # 입력 순서는 유지하되 외부에서 변경할 수 없게 고정
        frozen = MappingProxyType(dict(self.target_dependencies))
        object.__setattr__(self, "target_dependencies", frozen)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "product_type": self.product_type,
            "dependencies": [str(d) for d in self.target_dependencies.values()],
        }


# =============================================================================
# 진단
# =============================================================================

@dataclass(frozen=True)
class Diagnostic:
    """진단 기록"""
    severity: LogLevel
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"severity": self.severity.value, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.message}"
