"""
pbxdeps - Xcode 타겟 의존성 해석기
==================================

기능:
1. xcodeproj / xcworkspace 통합 조회 (타겟, 제품, 패키지)
2. 타겟의 직접 의존성을 제품 경로 또는 선언된 이름으로 해석
3. 워크스페이스 전역 타겟 → 프로젝트 라우팅
4. 시각화: Mermaid, DOT 다이어그램

사용법:
    # CLI
    python -m pbxdeps targets ./App.xcworkspace
    python -m pbxdeps deps ./App.xcworkspace App --format json
    python -m pbxdeps graph ./App.xcodeproj --dot

    # Python API
    from pbxdeps import ProjectParser, LogLevel

    parser = ProjectParser("./App.xcworkspace", log_level=LogLevel.WARNING)
    for dependency in parser.dependencies("App"):
        print(dependency)
"""

__version__ = "0.1.0"

# 모델
from .models import (
    # Enums
    LogLevel, DependencyKind,

    # Data classes
    NativeTarget, PackageProduct, TargetDependency, Diagnostic,
)

# 예외
from .errors import (
    PBXDepsError, InvalidPathError, ProjectLoadError, ConfigError,
)

# 진단
from .diagnostics import (
    DiagnosticsSink, LoggingSink, MemorySink, TeeSink,
)

# 기술 파일 / 모델
from .pbxproj import parse_openstep, read_pbxproj, read_workspace_projects
from .project import XcodeProject, XcodeWorkspace

# 파서
from .parser import ProjectParser, ProjectCase, WorkspaceCase

# 그래프
from .graph import TargetGraph, TargetEdge

# 설정
from .config import ParserConfig, TargetIgnoreRule

# 리포터
from .reporters import (
    ConsoleReporter, MarkdownReporter, JsonReporter,
)

# CLI
from .cli import main as cli_main

__all__ = [
    # Version
    '__version__',

    # Enums
    'LogLevel', 'DependencyKind',

    # Models
    'NativeTarget', 'PackageProduct', 'TargetDependency', 'Diagnostic',

    # Errors
    'PBXDepsError', 'InvalidPathError', 'ProjectLoadError', 'ConfigError',

    # Diagnostics
    'DiagnosticsSink', 'LoggingSink', 'MemorySink', 'TeeSink',

    # Description files / models
    'parse_openstep', 'read_pbxproj', 'read_workspace_projects',
    'XcodeProject', 'XcodeWorkspace',

    # Parser
    'ProjectParser', 'ProjectCase', 'WorkspaceCase',

    # Graph
    'TargetGraph', 'TargetEdge',

    # Config
    'ParserConfig', 'TargetIgnoreRule',

    # Reporters
    'ConsoleReporter', 'MarkdownReporter', 'JsonReporter',

    # CLI
    'cli_main',
]
