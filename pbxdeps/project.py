"""
pbxdeps/project.py
==================
Xcode 프로젝트 / 워크스페이스 모델

- XcodeProject: 타겟, 패키지 제품, 타겟 → 제품 경로
- XcodeWorkspace: 프로젝트 목록 + 타겟 → 소유 프로젝트 라우팅 테이블

두 모델 모두 생성 이후 불변이며 여러 스레드에서 잠금 없이 조회할 수 있다.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .diagnostics import DiagnosticsSink, LoggingSink
from .models import (
    LogLevel, DependencyKind, NativeTarget, PackageProduct, TargetDependency
)
from .pbxproj import read_pbxproj, read_workspace_projects

logger = logging.getLogger(__name__)

PLUGIN_PREFIX = "plugin:"


# =============================================================================
# 프로젝트
# =============================================================================

class XcodeProject:
    """
    단일 xcodeproj 모델

    내부 구조:
    - targets: {타겟 이름: NativeTarget}
    - packages: {패키지 제품 이름: PackageProduct}
    - _products: {productReference ID: 제품 경로}
    """

    def __init__(
        self,
        path: Union[str, Path],
        targets: Iterable[NativeTarget] = (),
        packages: Iterable[PackageProduct] = (),
        products: Optional[Mapping[str, str]] = None
    ):
        self.path = Path(path)

        target_map: Dict[str, NativeTarget] = {}
        for target in targets:
            target_map.setdefault(target.name, target)

        package_map: Dict[str, PackageProduct] = {}
        for package in packages:
            package_map.setdefault(package.name, package)

        self.targets: Mapping[str, NativeTarget] = MappingProxyType(target_map)
        self.packages: Mapping[str, PackageProduct] = MappingProxyType(package_map)
        self._products: Mapping[str, str] = MappingProxyType(dict(products or {}))

    # =========================================================================
    # 로드
    # =========================================================================

    @classmethod
    def load(cls, path: Union[str, Path], sink: Optional[DiagnosticsSink] = None) -> "XcodeProject":
        """
        .xcodeproj 번들에서 모델 생성

        Raises:
            ProjectLoadError: project.pbxproj를 읽을 수 없음
        """
        sink = sink if sink is not None else LoggingSink()
        data = read_pbxproj(Path(path))
        project = cls.from_objects(path, data["objects"], data.get("rootObject"))
        sink.record(
            LogLevel.DEBUG,
            f"Loaded {len(project.targets)} targets and {len(project.packages)} "
            f"packages from {project.path}"
        )
        return project

    @classmethod
    def from_objects(
        cls,
        path: Union[str, Path],
        objects: Mapping[str, Any],
        root_id: Optional[str] = None
    ) -> "XcodeProject":
        """pbxproj objects 테이블에서 모델 생성"""
        packages = _collect_packages(objects)
        products = {
            obj_id: obj["path"]
            for obj_id, obj in objects.items()
            if _isa(obj, "PBXFileReference") and "path" in obj
        }

        targets = [
            _build_target(obj_id, objects, packages, root_id)
            for obj_id in _target_ids(objects, root_id)
        ]

        return cls(path, targets, packages.values(), products)

    # =========================================================================
    # 조회
    # =========================================================================

    def product_path(self, target: NativeTarget) -> Optional[str]:
        """타겟의 빌드 제품 경로"""
        if target.product_ref is None:
            return None
        return self._products.get(target.product_ref)

    def path_for(self, native: TargetDependency) -> Optional[str]:
        """네이티브 의존성이 가리키는 타겟의 제품 경로 (해석 불가면 None)"""
        if native.kind is not DependencyKind.NATIVE or native.target_name is None:
            return None
        target = self.targets.get(native.target_name)
        if target is None:
            return None
        return self.product_path(target)

    def targets_and_products(self) -> Dict[str, str]:
        """{타겟 이름: 제품 경로}, 제품이 없는 타겟은 제외"""
        result: Dict[str, str] = {}
        for name, target in self.targets.items():
            product = self.product_path(target)
            if product is not None:
                result[name] = product
        return result

    @property
    def all_targets(self) -> List[NativeTarget]:
        return list(self.targets.values())

    @property
    def all_packages(self) -> List[PackageProduct]:
        return list(self.packages.values())

    def __repr__(self) -> str:
        return (f"XcodeProject(path={str(self.path)!r}, "
                f"targets={len(self.targets)}, packages={len(self.packages)})")


# =============================================================================
# pbxproj objects 해석
# =============================================================================

def _isa(obj: Any, name: str) -> bool:
    return isinstance(obj, dict) and obj.get("isa") == name


def _collect_packages(objects: Mapping[str, Any]) -> Dict[str, PackageProduct]:
    """XCSwiftPackageProductDependency → {객체 ID: PackageProduct}"""
    packages: Dict[str, PackageProduct] = {}

    for obj_id, obj in objects.items():
        if not _isa(obj, "XCSwiftPackageProductDependency"):
            continue

        name = obj.get("productName", obj_id)
        if name.startswith(PLUGIN_PREFIX):
            name = name[len(PLUGIN_PREFIX):]

        reference = objects.get(obj.get("package", ""), {})
        url = reference.get("repositoryURL") if isinstance(reference, dict) else None
        packages[obj_id] = PackageProduct(name=name, repository_url=url, object_id=obj_id)

    return packages


def _target_ids(objects: Mapping[str, Any], root_id: Optional[str]) -> List[str]:
    """PBXNativeTarget ID 목록 (PBXProject.targets 순서 우선)"""
    root = objects.get(root_id or "", {})
    ordered = root.get("targets", []) if _isa(root, "PBXProject") else []

    ids = [t for t in ordered if _isa(objects.get(t), "PBXNativeTarget")]
    ids += [
        obj_id for obj_id, obj in objects.items()
        if _isa(obj, "PBXNativeTarget") and obj_id not in ids
    ]
    return ids


def _target_name(obj: Mapping[str, Any], fallback: str) -> str:
    return obj.get("name") or obj.get("productName") or fallback


def _resolve_dependency(
    dep: Mapping[str, Any],
    objects: Mapping[str, Any],
    packages: Mapping[str, PackageProduct],
    root_id: Optional[str]
) -> Optional[TargetDependency]:
    """
    PBXTargetDependency 하나를 TargetDependency로 변환

    우선순위:
    1. target: 같은 프로젝트의 타겟
    2. productRef: 패키지 제품 (빌드 도구 플러그인 등)
    3. targetProxy: 같은 프로젝트를 가리키면 로컬 타겟, 아니면 교차 프로젝트 참조
    """
    target_id = dep.get("target")
    if target_id in objects:
        return TargetDependency.native(_target_name(objects[target_id], target_id))

    product_ref = dep.get("productRef")
    if product_ref in packages:
        return TargetDependency.of_package(packages[product_ref])

    proxy = objects.get(dep.get("targetProxy", ""))
    if isinstance(proxy, dict):
        remote_id = proxy.get("remoteGlobalIDString")
        if root_id and proxy.get("containerPortal") == root_id and remote_id in objects:
            return TargetDependency.native(_target_name(objects[remote_id], remote_id))
        name = dep.get("name") or proxy.get("remoteInfo")
        if name:
            return TargetDependency.native(name, local=False)

    if dep.get("name"):
        return TargetDependency.native(dep["name"], local=False)

    return None


def _build_target(
    obj_id: str,
    objects: Mapping[str, Any],
    packages: Mapping[str, PackageProduct],
    root_id: Optional[str]
) -> NativeTarget:
    obj = objects[obj_id]
    dependencies: Dict[str, TargetDependency] = {}

    for dep_id in obj.get("dependencies", []):
        dep = objects.get(dep_id)
        if not _isa(dep, "PBXTargetDependency"):
            logger.debug("Skipping unknown dependency object %s of %s", dep_id, obj_id)
            continue
        resolved = _resolve_dependency(dep, objects, packages, root_id)
        if resolved is not None:
            dependencies.setdefault(resolved.name, resolved)

    for package_id in obj.get("packageProductDependencies", []):
        package = packages.get(package_id)
        if package is not None:
            dependencies.setdefault(package.name, TargetDependency.of_package(package))

    return NativeTarget(
        name=_target_name(obj, obj_id),
        product_ref=obj.get("productReference"),
        product_type=obj.get("productType"),
        object_id=obj_id,
        target_dependencies=dependencies,
    )


# =============================================================================
# 워크스페이스
# =============================================================================

class XcodeWorkspace:
    """
    xcworkspace 모델

    targets_to_project는 생성 시 한 번 만들어지는 인덱스:
    1. 모든 프로젝트의 네이티브 타겟 이름 (먼저 발견된 프로젝트 우선)
    2. 아직 라우팅되지 않은 패키지 제품 이름

    서로 다른 프로젝트에 같은 이름의 타겟이 있으면 WARNING 진단을 남긴다.
    """

    def __init__(
        self,
        path: Union[str, Path],
        projects: Iterable[XcodeProject] = (),
        sink: Optional[DiagnosticsSink] = None
    ):
        self.path = Path(path)
        self.projects: Tuple[XcodeProject, ...] = tuple(projects)
        self.targets_to_project: Mapping[str, XcodeProject] = MappingProxyType(
            self._build_routing(sink if sink is not None else LoggingSink())
        )

    @classmethod
    def load(cls, path: Union[str, Path], sink: Optional[DiagnosticsSink] = None) -> "XcodeWorkspace":
        """
        .xcworkspace 번들에서 모델 생성

        존재하지 않는 프로젝트 참조는 WARNING 진단 후 건너뛴다.

        Raises:
            ProjectLoadError: contents.xcworkspacedata 또는 참조된 pbxproj를 읽을 수 없음
        """
        sink = sink if sink is not None else LoggingSink()
        projects: List[XcodeProject] = []

        for project_path in read_workspace_projects(Path(path)):
            if not project_path.exists():
                sink.record(
                    LogLevel.WARNING,
                    f"Skipping project referenced by workspace that does not exist: {project_path}"
                )
                continue
            projects.append(XcodeProject.load(project_path, sink))

        return cls(path, projects, sink)

    def _build_routing(self, sink: DiagnosticsSink) -> Dict[str, XcodeProject]:
        routes: Dict[str, XcodeProject] = {}

        for project in self.projects:
            for name in project.targets:
                owner = routes.get(name)
                if owner is None:
                    routes[name] = project
                elif owner is not project:
                    sink.record(
                        LogLevel.WARNING,
                        f"Target {name} exists in both {owner.path} and {project.path}, "
                        f"using {owner.path}"
                    )

        for project in self.projects:
            for name in project.packages:
                routes.setdefault(name, project)

        return routes

    # =========================================================================
    # 조회
    # =========================================================================

    def targets_and_products(self) -> Dict[str, str]:
        """모든 프로젝트의 {타겟 이름: 제품 경로} 합집합 (먼저 발견된 프로젝트 우선)"""
        result: Dict[str, str] = {}
        for project in self.projects:
            for name, product in project.targets_and_products().items():
                result.setdefault(name, product)
        return result

    @property
    def all_targets(self) -> List[NativeTarget]:
        return [t for project in self.projects for t in project.all_targets]

    @property
    def all_packages(self) -> List[PackageProduct]:
        return [p for project in self.projects for p in project.all_packages]

    def __repr__(self) -> str:
        return f"XcodeWorkspace(path={str(self.path)!r}, projects={len(self.projects)})"


__all__ = [
    'XcodeProject',
    'XcodeWorkspace',
]
