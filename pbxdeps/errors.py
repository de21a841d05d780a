"""
pbxdeps/errors.py
=================
예외 정의

생성 단계에서만 발생하는 치명적 오류. 조회 단계의 실패는 예외가 아니라
진단(Diagnostic)으로 보고된다.
"""

from pathlib import Path
from typing import Union


class PBXDepsError(Exception):
    """pbxdeps 예외 기본 클래스"""


class InvalidPathError(PBXDepsError):
    """xcodeproj / xcworkspace가 아닌 경로"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(
            f"Path should be a xcodeproj or xcworkspace, got: {self.path.name}"
        )


class ProjectLoadError(PBXDepsError):
    """프로젝트/워크스페이스 기술 파일을 읽을 수 없음"""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to load {self.path}: {reason}")


class ConfigError(PBXDepsError):
    """설정 파일 오류"""


__all__ = [
    'PBXDepsError',
    'InvalidPathError',
    'ProjectLoadError',
    'ConfigError',
]
