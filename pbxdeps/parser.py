"""
pbxdeps/parser.py
=================
프로젝트 파서 (핵심 해석 계층)

ProjectParser는 xcodeproj / xcworkspace 두 경우를 감싸는 닫힌 합 타입이다.
모든 조회는 활성 경우에 따라 하위 모델로 위임된다.

    parser = ProjectParser("App.xcworkspace", log_level=LogLevel.WARNING)
    parser.targets_to_products   # {"App": "App.app", ...}
    parser.dependencies("App")   # ["LibA.framework", "Alamofire"]
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .diagnostics import DiagnosticsSink, LoggingSink
from .errors import InvalidPathError
from .models import DependencyKind, LogLevel, NativeTarget, PackageProduct
from .project import XcodeProject, XcodeWorkspace


PROJECT_EXTENSION = ".xcodeproj"
WORKSPACE_EXTENSION = ".xcworkspace"


# =============================================================================
# 프로젝트 종류 (닫힌 합 타입)
# =============================================================================

@dataclass(frozen=True)
class ProjectCase:
    """단일 프로젝트"""
    project: XcodeProject


@dataclass(frozen=True)
class WorkspaceCase:
    """다중 프로젝트 워크스페이스"""
    workspace: XcodeWorkspace


ProjectType = Union[ProjectCase, WorkspaceCase]


# =============================================================================
# 파서
# =============================================================================

class ProjectParser:
    """
    프로젝트/워크스페이스 통합 조회 인터페이스

    생성은 완료되거나 실패하거나 둘 중 하나다. 생성 이후에는 변경 API가 없으며,
    조회 중의 "찾을 수 없음"은 예외 대신 진단 싱크로 보고하고 빈 결과를 반환한다.
    """

    def __init__(
        self,
        path: Union[str, Path],
        log_level: LogLevel = LogLevel.INFO,
        sink: Optional[DiagnosticsSink] = None
    ):
        """
        Args:
            path: .xcodeproj 또는 .xcworkspace 번들 경로
            log_level: 기본 싱크의 최소 레벨 (sink를 직접 주면 무시)
            sink: 진단 싱크

        Raises:
            InvalidPathError: 확장자가 xcodeproj / xcworkspace가 아님
            ProjectLoadError: 기술 파일을 읽을 수 없음
        """
        path = Path(path)
        sink = sink if sink is not None else LoggingSink(min_level=log_level)

        suffix = path.suffix
        if suffix == PROJECT_EXTENSION:
            kind: ProjectType = ProjectCase(XcodeProject.load(path, sink))
        elif suffix == WORKSPACE_EXTENSION:
            kind = WorkspaceCase(XcodeWorkspace.load(path, sink))
        else:
            raise InvalidPathError(path)

        self.path = path
        self.sink = sink
        self.type = kind

    @classmethod
    def from_project(cls, project: XcodeProject, sink: Optional[DiagnosticsSink] = None) -> "ProjectParser":
        """이미 만들어진 프로젝트 모델로 생성"""
        return cls._wrap(project.path, ProjectCase(project), sink)

    @classmethod
    def from_workspace(cls, workspace: XcodeWorkspace, sink: Optional[DiagnosticsSink] = None) -> "ProjectParser":
        """이미 만들어진 워크스페이스 모델로 생성"""
        return cls._wrap(workspace.path, WorkspaceCase(workspace), sink)

    @classmethod
    def _wrap(cls, path: Path, kind: ProjectType, sink: Optional[DiagnosticsSink]) -> "ProjectParser":
        parser = cls.__new__(cls)
        parser.path = path
        parser.sink = sink if sink is not None else LoggingSink()
        parser.type = kind
        return parser

    # =========================================================================
    # 조회
    # =========================================================================

    @property
    def is_workspace(self) -> bool:
        return isinstance(self.type, WorkspaceCase)

    @property
    def targets_to_products(self) -> Dict[str, str]:
        """타겟(빌드 명세) → 제품(빌드 결과) 경로"""
        if isinstance(self.type, ProjectCase):
            return self.type.project.targets_and_products()
        return self.type.workspace.targets_and_products()

    @property
    def all_targets(self) -> List[NativeTarget]:
        """모든 네이티브 타겟"""
        if isinstance(self.type, ProjectCase):
            return self.type.project.all_targets
        return self.type.workspace.all_targets

    @property
    def all_packages(self) -> List[PackageProduct]:
        """모든 패키지 제품"""
        if isinstance(self.type, ProjectCase):
            return self.type.project.all_packages
        return self.type.workspace.all_packages

    def dependencies(self, target: str) -> List[str]:
        """
        타겟의 직접 의존성 목록

        각 의존성은 해석 가능한 네이티브 의존성이면 제품 경로로,
        그 외(해석 불가 네이티브, 패키지)에는 선언된 이름으로 변환된다.
        순서는 타겟에 선언된 순서를 따르며 정렬/중복 제거하지 않는다.

        Args:
            target: 타겟 이름

        Returns:
            의존성 식별자 목록 (찾지 못하면 빈 목록)
        """
        project = self.project_for(target)
        if project is None:
            self.sink.record(LogLevel.ERROR, f"Failed to find project for target: {target}")
            return []

        native = project.targets.get(target)
        if native is None:
            # 패키지는 pbxproj에 자신의 의존성을 나열하지 않으므로 경고하지 않음
            if target not in project.packages:
                self.sink.record(
                    LogLevel.ERROR,
                    f"Failed to find a target: {target} in project: {project.path}"
                )
            return []

        resolved: List[str] = []
        for dependency in native.target_dependencies.values():
            path = None
            if dependency.kind is DependencyKind.NATIVE:
                path = project.path_for(dependency)
            resolved.append(path if path is not None else dependency.name)

        return resolved

    def project_for(self, target: str) -> Optional[XcodeProject]:
        """타겟을 소유한 프로젝트"""
        if isinstance(self.type, ProjectCase):
            return self.type.project
        return self.type.workspace.targets_to_project.get(target)

    def __repr__(self) -> str:
        kind = "workspace" if self.is_workspace else "project"
        return f"ProjectParser(path={str(self.path)!r}, type={kind})"


__all__ = [
    'PROJECT_EXTENSION',
    'WORKSPACE_EXTENSION',
    'ProjectCase',
    'WorkspaceCase',
    'ProjectType',
    'ProjectParser',
]
