#!/usr/bin/env python3
"""
pbxdeps/tests.py
================
통합 테스트

실행:
    python -m pbxdeps.tests
"""

import io
import json
import logging
import plistlib
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from typing import Any

from .config import ParserConfig
from .diagnostics import LoggingSink, MemorySink, TeeSink
from .errors import ConfigError, InvalidPathError, ProjectLoadError
from .graph import TargetEdge, TargetGraph
from .models import (
    DependencyKind, Diagnostic, LogLevel, NativeTarget, PackageProduct, TargetDependency
)
from .parser import ProjectCase, ProjectParser, WorkspaceCase
from .pbxproj import (
    PlistSyntaxError, parse_openstep, read_pbxproj, read_workspace_projects
)
from .project import XcodeProject, XcodeWorkspace
from .reporters import ConsoleReporter, JsonReporter, MarkdownReporter
from .cli import main as cli_main


# =============================================================================
# 픽스처
# =============================================================================

APP_PBXPROJ = r"""// !$*UTF8*$!
{
	archiveVersion = 1;
	classes = {
	};
	objectVersion = 56;
	objects = {

/* Begin PBXContainerItemProxy section */
		XAPP /* PBXContainerItemProxy */ = {
			isa = PBXContainerItemProxy;
			containerPortal = PROJAPP /* Project object */;
			proxyType = 1;
			remoteGlobalIDString = TAPP;
			remoteInfo = App;
		};
		XNET /* PBXContainerItemProxy */ = {
			isa = PBXContainerItemProxy;
			containerPortal = FNETPROJ /* Networking.xcodeproj */;
			proxyType = 1;
			remoteGlobalIDString = 0000REMOTE;
			remoteInfo = Networking;
		};
/* End PBXContainerItemProxy section */

/* Begin PBXFileReference section */
		FAPP /* App.app */ = {isa = PBXFileReference; explicitFileType = wrapper.application; includeInIndex = 0; path = App.app; sourceTree = BUILT_PRODUCTS_DIR; };
		FLIBA /* LibA.framework */ = {isa = PBXFileReference; explicitFileType = wrapper.framework; includeInIndex = 0; path = LibA.framework; sourceTree = BUILT_PRODUCTS_DIR; };
		FTESTS /* AppTests.xctest */ = {isa = PBXFileReference; explicitFileType = wrapper.cfbundle; includeInIndex = 0; path = AppTests.xctest; sourceTree = BUILT_PRODUCTS_DIR; };
		FNETPROJ /* Networking.xcodeproj */ = {isa = PBXFileReference; lastKnownFileType = "wrapper.pb-project"; path = ../Networking/Networking.xcodeproj; sourceTree = "<group>"; };
/* End PBXFileReference section */

/* Begin PBXNativeTarget section */
		TAPP /* App */ = {
			isa = PBXNativeTarget;
			buildPhases = (
			);
			dependencies = (
				DLIBA /* PBXTargetDependency */,
				DNET /* PBXTargetDependency */,
			);
			name = App;
			packageProductDependencies = (
				PALAMO /* Alamofire */,
			);
			productName = App;
			productReference = FAPP /* App.app */;
			productType = "com.apple.product-type.application";
		};
		TLIBA /* LibA */ = {
			isa = PBXNativeTarget;
			dependencies = (
			);
			name = LibA;
			productName = LibA;
			productReference = FLIBA /* LibA.framework */;
			productType = "com.apple.product-type.framework";
		};
		TTESTS /* AppTests */ = {
			isa = PBXNativeTarget;
			dependencies = (
				DAPP /* PBXTargetDependency */,
			);
			name = AppTests;
			productName = AppTests;
			productReference = FTESTS /* AppTests.xctest */;
			productType = "com.apple.product-type.bundle.unit-test";
		};
/* End PBXNativeTarget section */

/* Begin PBXProject section */
		PROJAPP /* Project object */ = {
			isa = PBXProject;
			packageReferences = (
				RALAMO /* XCRemoteSwiftPackageReference "Alamofire" */,
			);
			targets = (
				TAPP /* App */,
				TLIBA /* LibA */,
				TTESTS /* AppTests */,
			);
		};
/* End PBXProject section */

/* Begin PBXTargetDependency section */
		DLIBA /* PBXTargetDependency */ = {
			isa = PBXTargetDependency;
			target = TLIBA /* LibA */;
		};
		DNET /* PBXTargetDependency */ = {
			isa = PBXTargetDependency;
			name = Networking;
			targetProxy = XNET /* PBXContainerItemProxy */;
		};
		DAPP /* PBXTargetDependency */ = {
			isa = PBXTargetDependency;
			targetProxy = XAPP /* PBXContainerItemProxy */;
		};
/* End PBXTargetDependency section */

/* Begin XCRemoteSwiftPackageReference section */
		RALAMO /* XCRemoteSwiftPackageReference "Alamofire" */ = {
			isa = XCRemoteSwiftPackageReference;
			repositoryURL = "https://github.com/Alamofire/Alamofire.git";
			requirement = {
				kind = upToNextMajorVersion;
				minimumVersion = 5.8.0;
			};
		};
/* End XCRemoteSwiftPackageReference section */

/* Begin XCSwiftPackageProductDependency section */
		PALAMO /* Alamofire */ = {
			isa = XCSwiftPackageProductDependency;
			package = RALAMO /* XCRemoteSwiftPackageReference "Alamofire" */;
			productName = Alamofire;
		};
/* End XCSwiftPackageProductDependency section */
	};
	rootObject = PROJAPP /* Project object */;
}
"""

CORE_OBJECTS = {
    "PROJCORE": {"isa": "PBXProject", "targets": ["TCORE", "TUTIL"]},
    "TCORE": {
        "isa": "PBXNativeTarget",
        "name": "Core",
        "dependencies": ["DUTIL"],
        "packageProductDependencies": ["PALAMO2"],
        "productReference": "FCORE",
    },
    "TUTIL": {
        "isa": "PBXNativeTarget",
        "name": "Util",
        "dependencies": [],
        "productReference": "FUTIL",
    },
    "DUTIL": {"isa": "PBXTargetDependency", "target": "TUTIL"},
    "FCORE": {"isa": "PBXFileReference", "path": "Core.framework"},
    "FUTIL": {"isa": "PBXFileReference", "path": "Util.framework"},
    "PALAMO2": {"isa": "XCSwiftPackageProductDependency", "productName": "Alamofire"},
}

WORKSPACE_DATA = """<?xml version="1.0" encoding="UTF-8"?>
<Workspace
   version = "1.0">
   <FileRef
      location = "group:App/App.xcodeproj">
   </FileRef>
   <Group
      location = "container:Libs"
      name = "Libs">
      <FileRef
         location = "group:Core/Core.xcodeproj">
      </FileRef>
   </Group>
   <FileRef
      location = "group:Gone/Gone.xcodeproj">
   </FileRef>
   <FileRef
      location = "group:README.md">
   </FileRef>
</Workspace>
"""


def to_openstep(value: Any) -> str:
    """테스트용 최소 OpenStep 직렬화"""
    if isinstance(value, dict):
        body = "".join(f'"{k}" = {to_openstep(v)}; ' for k, v in value.items())
        return "{ " + body + "}"
    if isinstance(value, list):
        return "(" + ", ".join(to_openstep(v) for v in value) + ")"
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def write_project(root: Path, relative: str, text: str) -> Path:
    bundle = root / relative
    bundle.mkdir(parents=True)
    (bundle / "project.pbxproj").write_text(text, encoding="utf-8")
    return bundle


def write_workspace(root: Path) -> Path:
    write_project(root, "App/App.xcodeproj", APP_PBXPROJ)
    write_project(
        root, "Libs/Core/Core.xcodeproj",
        to_openstep({"objects": CORE_OBJECTS, "rootObject": "PROJCORE"})
    )
    workspace = root / "Main.xcworkspace"
    workspace.mkdir()
    (workspace / "contents.xcworkspacedata").write_text(WORKSPACE_DATA, encoding="utf-8")
    return workspace


def make_example_project(path: str = "/tmp/Example.xcodeproj") -> XcodeProject:
    """App → [LibA(native), LibB(package)], LibA → /build/LibA.framework"""
    lib_b = PackageProduct(name="LibB")
    app = NativeTarget(
        name="App",
        product_ref="FAPP",
        target_dependencies={
            "LibA": TargetDependency.native("LibA"),
            "LibB": TargetDependency.of_package(lib_b),
        },
    )
    lib_a = NativeTarget(name="LibA", product_ref="FLIBA")
    return XcodeProject(
        path,
        targets=[app, lib_a],
        packages=[lib_b],
        products={"FAPP": "/build/App.app", "FLIBA": "/build/LibA.framework"},
    )


# =============================================================================
# OpenStep plist
# =============================================================================

class TestOpenStepParser(unittest.TestCase):
    """OpenStep plist 파서 테스트"""

    def test_dict_and_array(self):
        """딕셔너리/배열/주석"""
        data = parse_openstep("""
        // !$*UTF8*$!
        {
            a = 1;          /* 숫자도 문자열 */
            list = (x, "y z", );
            nested = { key = value; };
        }
        """)
        self.assertEqual(data["a"], "1")
        self.assertEqual(data["list"], ["x", "y z"])
        self.assertEqual(data["nested"], {"key": "value"})

    def test_escapes(self):
        """따옴표 문자열 이스케이프"""
        data = parse_openstep(r'{ line = "a\nb"; quote = "say \"hi\""; uni = "\U00e9"; }')
        self.assertEqual(data["line"], "a\nb")
        self.assertEqual(data["quote"], 'say "hi"')
        self.assertEqual(data["uni"], "é")

    def test_bare_paths(self):
        """비따옴표 경로 토큰"""
        data = parse_openstep("{ path = ../Libs/Core.xcodeproj; root = /usr/lib; }")
        self.assertEqual(data["path"], "../Libs/Core.xcodeproj")
        self.assertEqual(data["root"], "/usr/lib")

    def test_data(self):
        data = parse_openstep("{ blob = <0fbd 7772>; }")
        self.assertEqual(data["blob"], bytes.fromhex("0fbd7772"))

    def test_syntax_errors(self):
        """문법 오류"""
        for text in ("{ a = 1 }", "{ a = 1;", "(a b)", "{ a = 1; } extra", "{ a = [; }"):
            with self.assertRaises(PlistSyntaxError, msg=text):
                parse_openstep(text)


class TestReadPbxproj(unittest.TestCase):
    """project.pbxproj 읽기 테스트"""

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            bundle = Path(tmpdir) / "Empty.xcodeproj"
            bundle.mkdir()
            with self.assertRaises(ProjectLoadError):
                read_pbxproj(bundle)

    def test_unparsable(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            bundle = write_project(Path(tmpdir), "Bad.xcodeproj", "{ objects = (;")
            with self.assertRaises(ProjectLoadError):
                read_pbxproj(bundle)

    def test_missing_objects(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            bundle = write_project(Path(tmpdir), "NoObjects.xcodeproj", "{ archiveVersion = 1; }")
            with self.assertRaises(ProjectLoadError):
                read_pbxproj(bundle)

    def test_xml_plist(self):
        """XML 형식 plist는 plistlib으로 읽음"""
        with tempfile.TemporaryDirectory() as tmpdir:
            bundle = Path(tmpdir) / "Xml.xcodeproj"
            bundle.mkdir()
            payload = {"objects": CORE_OBJECTS, "rootObject": "PROJCORE"}
            (bundle / "project.pbxproj").write_bytes(plistlib.dumps(payload))

            data = read_pbxproj(bundle)
            self.assertEqual(data["rootObject"], "PROJCORE")
            self.assertIn("TCORE", data["objects"])


# =============================================================================
# 프로젝트 모델
# =============================================================================

class TestXcodeProjectLoad(unittest.TestCase):
    """pbxproj → XcodeProject 테스트"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.bundle = write_project(self.root, "App.xcodeproj", APP_PBXPROJ)
        self.project = XcodeProject.load(self.bundle, MemorySink())

    def tearDown(self):
        self._tmp.cleanup()

    def test_targets_in_project_order(self):
        self.assertEqual(list(self.project.targets), ["App", "LibA", "AppTests"])
        self.assertEqual(
            self.project.targets["App"].product_type,
            "com.apple.product-type.application"
        )

    def test_packages(self):
        package = self.project.packages["Alamofire"]
        self.assertEqual(package.repository_url, "https://github.com/Alamofire/Alamofire.git")
        self.assertNotIn("Alamofire", self.project.targets)

    def test_targets_and_products(self):
        self.assertEqual(self.project.targets_and_products(), {
            "App": "App.app",
            "LibA": "LibA.framework",
            "AppTests": "AppTests.xctest",
        })

    def test_dependency_kinds(self):
        """로컬 타겟 / 교차 프로젝트 / 패키지 의존성 분류"""
        deps = self.project.targets["App"].target_dependencies
        self.assertEqual(list(deps), ["LibA", "Networking", "Alamofire"])

        self.assertEqual(deps["LibA"].kind, DependencyKind.NATIVE)
        self.assertEqual(deps["LibA"].target_name, "LibA")

        self.assertEqual(deps["Networking"].kind, DependencyKind.NATIVE)
        self.assertIsNone(deps["Networking"].target_name)

        self.assertEqual(deps["Alamofire"].kind, DependencyKind.PACKAGE)

    def test_proxy_to_same_project_is_local(self):
        """같은 프로젝트를 가리키는 targetProxy는 로컬 타겟"""
        dep = self.project.targets["AppTests"].target_dependencies["App"]
        self.assertEqual(dep.target_name, "App")
        self.assertEqual(self.project.path_for(dep), "App.app")

    def test_path_for(self):
        deps = self.project.targets["App"].target_dependencies
        self.assertEqual(self.project.path_for(deps["LibA"]), "LibA.framework")
        self.assertIsNone(self.project.path_for(deps["Networking"]))
        self.assertIsNone(self.project.path_for(deps["Alamofire"]))

    def test_models_are_read_only(self):
        with self.assertRaises(TypeError):
            self.project.targets["X"] = NativeTarget(name="X")
        with self.assertRaises(TypeError):
            self.project.targets["App"].target_dependencies["X"] = TargetDependency.native("X")


# =============================================================================
# 파서: 단일 프로젝트
# =============================================================================

class TestProjectParser(unittest.TestCase):
    """ProjectParser (xcodeproj) 테스트"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.bundle = write_project(self.root, "App.xcodeproj", APP_PBXPROJ)
        self.sink = MemorySink()
        self.parser = ProjectParser(self.bundle, sink=self.sink)
        self.sink.clear()

    def tearDown(self):
        self._tmp.cleanup()

    def test_project_case(self):
        self.assertIsInstance(self.parser.type, ProjectCase)
        self.assertFalse(self.parser.is_workspace)

    def test_dependencies(self):
        """네이티브는 제품 경로, 그 외는 이름"""
        self.assertEqual(
            self.parser.dependencies("App"),
            ["LibA.framework", "Networking", "Alamofire"]
        )
        self.assertEqual(self.parser.dependencies("AppTests"), ["App.app"])
        self.assertEqual(len(self.sink), 0)

    def test_empty_dependencies(self):
        self.assertEqual(self.parser.dependencies("LibA"), [])
        self.assertEqual(len(self.sink), 0)

    def test_unknown_target(self):
        """알 수 없는 타겟: 빈 결과 + 진단 1개"""
        self.assertEqual(self.parser.dependencies("Missing"), [])
        records = self.sink.records
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].severity, LogLevel.ERROR)
        self.assertIn("Missing", records[0].message)

    def test_package_name_is_silent(self):
        """패키지 이름: 빈 결과, 진단 없음"""
        self.assertEqual(self.parser.dependencies("Alamofire"), [])
        self.assertEqual(len(self.sink), 0)

    def test_idempotent(self):
        first = (self.parser.targets_to_products, self.parser.dependencies("App"))
        second = (self.parser.targets_to_products, self.parser.dependencies("App"))
        self.assertEqual(first, second)

        again = ProjectParser(self.bundle, sink=MemorySink())
        self.assertEqual(again.targets_to_products, self.parser.targets_to_products)
        self.assertEqual(again.dependencies("App"), self.parser.dependencies("App"))

    def test_projections(self):
        self.assertEqual([t.name for t in self.parser.all_targets], ["App", "LibA", "AppTests"])
        self.assertEqual([p.name for p in self.parser.all_packages], ["Alamofire"])

    def test_invalid_extension(self):
        """잘못된 확장자: InvalidPathError, 진단 없음"""
        sink = MemorySink()
        for name in ("App.txt", "App", "Package.swift", "App.xcodeproj.bak"):
            with self.assertRaises(InvalidPathError) as ctx:
                ProjectParser(self.root / name, sink=sink)
            self.assertIn(name, str(ctx.exception))
        self.assertEqual(len(sink), 0)

    def test_missing_bundle(self):
        with self.assertRaises(ProjectLoadError):
            ProjectParser(self.root / "Nope.xcodeproj", sink=MemorySink())

    def test_injected_sink_is_kept(self):
        sink = MemorySink()
        parser = ProjectParser(self.bundle, sink=sink)
        self.assertIs(parser.sink, sink)

        parser.dependencies("Missing")
        errors = sink.at_least(LogLevel.ERROR)
        self.assertEqual(len(errors), 1)
        self.assertIn("Missing", errors[0].message)

    def test_default_sink_respects_log_level(self):
        """sink 없이 만들면 log_level 이상만 pbxdeps 로거로"""
        parser = ProjectParser(self.bundle, log_level=LogLevel.ERROR)
        self.assertIsInstance(parser.sink, LoggingSink)
        self.assertEqual(parser.sink.min_level, LogLevel.ERROR)
        with self.assertLogs("pbxdeps", level="DEBUG") as cm:
            parser.dependencies("Missing")
        self.assertEqual(len(cm.output), 1)
        self.assertTrue(cm.output[0].startswith("ERROR:pbxdeps:"))


class TestResolutionOrder(unittest.TestCase):
    """모델을 직접 구성한 해석 테스트"""

    def test_declared_order(self):
        """App → [LibA(native), LibB(package)]"""
        sink = MemorySink()
        parser = ProjectParser.from_project(make_example_project(), sink)
        self.assertEqual(parser.dependencies("App"), ["/build/LibA.framework", "LibB"])
        self.assertEqual(len(sink), 0)

    def test_no_dedup_no_sort(self):
        target = NativeTarget(
            name="Z",
            target_dependencies={
                "b": TargetDependency.native("b", local=False),
                "a": TargetDependency.native("a", local=False),
            },
        )
        parser = ProjectParser.from_project(
            XcodeProject("/tmp/Z.xcodeproj", targets=[target]), MemorySink()
        )
        self.assertEqual(parser.dependencies("Z"), ["b", "a"])

    def test_native_without_product_falls_back_to_name(self):
        target = NativeTarget(
            name="App",
            target_dependencies={"Aggregate": TargetDependency.native("Aggregate")},
        )
        aggregate = NativeTarget(name="Aggregate")
        parser = ProjectParser.from_project(
            XcodeProject("/tmp/A.xcodeproj", targets=[target, aggregate]), MemorySink()
        )
        self.assertEqual(parser.dependencies("App"), ["Aggregate"])


# =============================================================================
# 워크스페이스
# =============================================================================

class TestWorkspace(unittest.TestCase):
    """ProjectParser (xcworkspace) 테스트"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.workspace_path = write_workspace(self.root)
        self.sink = MemorySink()
        self.parser = ProjectParser(self.workspace_path, sink=self.sink)

    def tearDown(self):
        self._tmp.cleanup()

    def test_read_workspace_projects(self):
        """Group 중첩 location 해석, xcodeproj만"""
        self.assertEqual(read_workspace_projects(self.workspace_path), [
            self.root / "App" / "App.xcodeproj",
            self.root / "Libs" / "Core" / "Core.xcodeproj",
            self.root / "Gone" / "Gone.xcodeproj",
        ])

    def test_missing_project_warning(self):
        """존재하지 않는 프로젝트는 경고 후 건너뜀"""
        warnings = self.sink.at_least(LogLevel.WARNING)
        self.assertEqual(len(warnings), 1)
        self.assertIn("Gone.xcodeproj", warnings[0].message)
        self.assertEqual(len(self.parser.type.workspace.projects), 2)

    def test_workspace_case(self):
        self.assertIsInstance(self.parser.type, WorkspaceCase)
        self.assertTrue(self.parser.is_workspace)

    def test_routes_to_second_project(self):
        """두 번째 프로젝트 소유 타겟도 해석"""
        self.sink.clear()
        self.assertEqual(self.parser.dependencies("Core"), ["Util.framework", "Alamofire"])
        self.assertEqual(self.parser.dependencies("App"), ["LibA.framework", "Networking", "Alamofire"])
        self.assertEqual(len(self.sink), 0)

    def test_unknown_target(self):
        self.sink.clear()
        self.assertEqual(self.parser.dependencies("Missing"), [])
        records = self.sink.records
        self.assertEqual(len(records), 1)
        self.assertIn("Failed to find project for target: Missing", records[0].message)

    def test_package_is_routed_silently(self):
        self.sink.clear()
        self.assertEqual(self.parser.dependencies("Alamofire"), [])
        self.assertEqual(len(self.sink), 0)

    def test_targets_to_products_is_union(self):
        workspace = self.parser.type.workspace
        expected = {}
        for project in workspace.projects:
            for name, product in project.targets_and_products().items():
                expected.setdefault(name, product)

        self.assertEqual(self.parser.targets_to_products, expected)
        self.assertEqual(self.parser.targets_to_products["Util"], "Util.framework")
        self.assertEqual(len(self.parser.targets_to_products), 5)

    def test_concatenation_order(self):
        """프로젝트별 연속 순서 유지"""
        self.assertEqual(
            [t.name for t in self.parser.all_targets],
            ["App", "LibA", "AppTests", "Core", "Util"]
        )
        self.assertEqual([p.name for p in self.parser.all_packages], ["Alamofire", "Alamofire"])


class TestWorkspaceRouting(unittest.TestCase):
    """라우팅 테이블 테스트"""

    def test_first_project_wins_with_warning(self):
        first = make_example_project("/tmp/First.xcodeproj")
        second = XcodeProject(
            "/tmp/Second.xcodeproj",
            targets=[
                NativeTarget(name="LibA", product_ref="F2"),
                NativeTarget(name="Only", product_ref="F3"),
            ],
            products={"F2": "/other/LibA.framework", "F3": "/other/Only.framework"},
        )
        sink = MemorySink()
        workspace = XcodeWorkspace("/tmp/W.xcworkspace", [first, second], sink)

        self.assertIs(workspace.targets_to_project["LibA"], first)
        self.assertIs(workspace.targets_to_project["Only"], second)

        warnings = sink.at_least(LogLevel.WARNING)
        self.assertEqual(len(warnings), 1)
        self.assertIn("LibA", warnings[0].message)
        self.assertIn("First.xcodeproj", warnings[0].message)
        self.assertIn("Second.xcodeproj", warnings[0].message)

        parser = ProjectParser.from_workspace(workspace, sink)
        self.assertEqual(parser.targets_to_products["LibA"], "/build/LibA.framework")
        self.assertEqual(parser.targets_to_products["Only"], "/other/Only.framework")

    def test_target_wins_over_package_name(self):
        with_package = XcodeProject("/tmp/P.xcodeproj", packages=[PackageProduct(name="Shared")])
        with_target = XcodeProject(
            "/tmp/T.xcodeproj",
            targets=[NativeTarget(
                name="Shared",
                target_dependencies={"X": TargetDependency.native("X", local=False)},
            )],
        )
        workspace = XcodeWorkspace("/tmp/W.xcworkspace", [with_package, with_target], MemorySink())
        self.assertIs(workspace.targets_to_project["Shared"], with_target)

        parser = ProjectParser.from_workspace(workspace, MemorySink())
        self.assertEqual(parser.dependencies("Shared"), ["X"])

    def test_routing_references_same_instances(self):
        project = make_example_project()
        workspace = XcodeWorkspace("/tmp/W.xcworkspace", [project], MemorySink())
        self.assertIs(workspace.targets_to_project["App"], workspace.projects[0])


# =============================================================================
# 진단
# =============================================================================

class TestDiagnostics(unittest.TestCase):
    """진단 싱크 테스트"""

    def test_logging_sink_filters_by_level(self):
        sink = LoggingSink(min_level=LogLevel.WARNING)
        with self.assertLogs("pbxdeps", level="DEBUG") as cm:
            sink.record(LogLevel.DEBUG, "hidden")
            sink.record(LogLevel.ERROR, "shown")
        self.assertEqual(len(cm.output), 1)
        self.assertIn("shown", cm.output[0])

    def test_memory_sink(self):
        sink = MemorySink()
        sink.record(LogLevel.TRACE, "t")
        sink.record(LogLevel.WARNING, "w")
        self.assertEqual(len(sink), 2)
        self.assertEqual(sink.at_least(LogLevel.WARNING), [Diagnostic(LogLevel.WARNING, "w")])

    def test_tee_sink(self):
        a, b = MemorySink(), MemorySink(min_level=LogLevel.ERROR)
        tee = TeeSink(a, b)
        tee.record(LogLevel.INFO, "info")
        self.assertEqual((len(a), len(b)), (1, 0))

    def test_log_level_parse(self):
        self.assertEqual(LogLevel.parse("WARN"), LogLevel.WARNING)
        self.assertEqual(LogLevel.parse("trace"), LogLevel.TRACE)
        self.assertTrue(LogLevel.ERROR >= LogLevel.WARNING)
        self.assertTrue(LogLevel.TRACE < LogLevel.DEBUG)
        with self.assertRaises(ValueError):
            LogLevel.parse("loud")

    def test_parser_diagnostics_respect_level(self):
        """레벨은 관찰 여부만 결정"""
        sink = MemorySink(min_level=LogLevel.CRITICAL)
        parser = ProjectParser.from_project(make_example_project(), sink)
        self.assertIs(parser.sink, sink)
        self.assertEqual(parser.dependencies("Missing"), [])
        self.assertEqual(len(sink), 0)

    def test_empty_memory_sink_is_kept(self):
        """비어 있는 싱크도 그대로 사용"""
        sink = MemorySink()
        parser = ProjectParser.from_project(make_example_project(), sink)
        self.assertIs(parser.sink, sink)

        self.assertEqual(parser.dependencies("Missing"), [])
        self.assertEqual(len(sink), 1)
        self.assertEqual(sink.records[0].severity, LogLevel.ERROR)

    def test_default_sink_uses_logger(self):
        parser = ProjectParser.from_project(make_example_project())
        self.assertIsInstance(parser.sink, LoggingSink)
        with self.assertLogs("pbxdeps", level="ERROR") as cm:
            parser.dependencies("Missing")
        self.assertEqual(len(cm.output), 1)
        self.assertIn("Missing", cm.output[0])

    def test_logging_sink_registers_level_names(self):
        LoggingSink()
        self.assertEqual(logging.getLevelName(LogLevel.TRACE.logging_level), "TRACE")
        self.assertEqual(logging.getLevelName(LogLevel.NOTICE.logging_level), "NOTICE")


# =============================================================================
# 설정
# =============================================================================

class TestConfig(unittest.TestCase):
    """설정 파일 테스트"""

    def test_load_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / ".pbxdeps.yaml"
            path.write_text(
                "log_level: warn\n"
                "format: json\n"
                "ignore_targets:\n"
                "  - '*Tests'\n"
                "  - pattern: 'Pods-*'\n"
                "    reason: CocoaPods aggregate\n"
            )
            config = ParserConfig.load(path)

        self.assertEqual(config.log_level, LogLevel.WARNING)
        self.assertEqual(config.output_format, "json")
        self.assertEqual(config.should_ignore_target("AppTests")[0], True)
        self.assertEqual(config.should_ignore_target("Pods-App"), (True, "CocoaPods aggregate"))
        self.assertEqual(config.should_ignore_target("App"), (False, ""))

    def test_discover(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            bundle = root / "App.xcodeproj"
            self.assertEqual(ParserConfig.discover(bundle).log_level, LogLevel.INFO)

            (root / ".pbxdeps.yaml").write_text("log_level: error\n")
            self.assertEqual(ParserConfig.discover(bundle).log_level, LogLevel.ERROR)

    def test_save_roundtrip(self):
        config = ParserConfig(log_level=LogLevel.DEBUG)
        config.add_rule("*Tests", reason="tests")
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.yaml"
            config.save(path)
            loaded = ParserConfig.load(path)
        self.assertEqual(loaded.to_dict(), config.to_dict())

    def test_invalid(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yaml"
            for text in ("log_level: [unclosed\n", "log_level: loud\n", "- a\n- b\n", "format: xml\n"):
                path.write_text(text)
                with self.assertRaises(ConfigError, msg=text):
                    ParserConfig.load(path)

    def test_filter_targets(self):
        config = ParserConfig()
        config.add_rule("*Tests")
        targets = [NativeTarget(name="App"), NativeTarget(name="AppTests")]
        self.assertEqual([t.name for t in config.filter_targets(targets)], ["App"])


# =============================================================================
# 그래프
# =============================================================================

class TestGraph(unittest.TestCase):
    """타겟 그래프 테스트"""

    def test_from_parser(self):
        parser = ProjectParser.from_project(make_example_project(), MemorySink())
        graph = TargetGraph.from_parser(parser)

        self.assertTrue(graph.has_edge("App", "/build/LibA.framework"))
        self.assertTrue(graph.has_edge("App", "LibB"))
        self.assertEqual(graph.get_dependencies("App"), ["/build/LibA.framework", "LibB"])
        self.assertEqual(graph.get_dependents("LibB"), ["App"])
        self.assertEqual(graph.edge_count, 2)
        self.assertIn("LibA", graph)

    def test_duplicate_edge(self):
        graph = TargetGraph()
        graph.add_edge(TargetEdge("A", "B"))
        graph.add_edge(TargetEdge("A", "B"))
        self.assertEqual(graph.edge_count, 1)
        self.assertEqual(graph.get_roots(), ["A"])
        self.assertEqual(graph.get_leaves(), ["B"])

    def test_mermaid_output(self):
        graph = TargetGraph()
        graph.add_edge(TargetEdge("App", "LibA.framework"))
        mermaid = graph.to_mermaid()
        self.assertIn("graph TD", mermaid)
        self.assertIn('App["App"] --> LibA_framework["LibA.framework"]', mermaid)

    def test_dot_output(self):
        graph = TargetGraph()
        graph.add_edge(TargetEdge("App", "LibA.framework"))
        dot = graph.to_dot()
        self.assertIn('App -> "LibA.framework";', dot)
        self.assertTrue(dot.endswith("}"))


# =============================================================================
# 리포터
# =============================================================================

class TestReporters(unittest.TestCase):
    """리포터 테스트"""

    def setUp(self):
        self.project = make_example_project()
        self.targets = self.project.all_targets
        self.products = self.project.targets_and_products()

    def test_console(self):
        out = io.StringIO()
        reporter = ConsoleReporter(out)
        reporter.report_targets(self.targets, self.products)
        reporter.report_dependencies("App", ["/build/LibA.framework", "LibB"])
        text = out.getvalue()
        self.assertIn("App → /build/App.app", text)
        self.assertIn("• LibB", text)
        self.assertNotIn("\033[", text)

    def test_markdown(self):
        out = io.StringIO()
        reporter = MarkdownReporter(out)
        reporter.report_packages(self.project.all_packages)
        reporter.report_diagnostics([Diagnostic(LogLevel.ERROR, "boom")])
        text = out.getvalue()
        self.assertIn("- **LibB**", text)
        self.assertIn("**error**: boom", text)

    def test_json(self):
        out = io.StringIO()
        reporter = JsonReporter(out)
        reporter.report_dependencies("App", ["/build/LibA.framework", "LibB"])
        reporter.report_diagnostics([])
        reporter.flush()
        data = json.loads(out.getvalue())
        self.assertEqual(data["dependencies"], ["/build/LibA.framework", "LibB"])
        self.assertEqual(data["diagnostics"], [])


# =============================================================================
# CLI
# =============================================================================

class TestCLI(unittest.TestCase):
    """CLI 통합 테스트"""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.workspace_path = write_workspace(self.root)

    def tearDown(self):
        self._tmp.cleanup()

    def run_cli(self, *argv: str):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli_main(list(argv))
        return code, out.getvalue()

    def test_deps_json(self):
        code, text = self.run_cli(
            "deps", str(self.workspace_path), "Core", "--format", "json", "--log-level", "error"
        )
        self.assertEqual(code, 0)
        data = json.loads(text)
        self.assertEqual(data["target"], "Core")
        self.assertEqual(data["dependencies"], ["Util.framework", "Alamofire"])

    def test_deps_unknown_target_exit_code(self):
        """종료 코드는 로그 레벨과 무관, 문서의 진단만 레벨로 필터"""
        code, text = self.run_cli(
            "deps", str(self.workspace_path), "Missing", "--format", "json", "--log-level", "critical"
        )
        self.assertEqual(code, 1)
        self.assertEqual(json.loads(text)["diagnostics"], [])

        code, text = self.run_cli(
            "deps", str(self.workspace_path), "Missing", "--format", "json", "--log-level", "error"
        )
        self.assertEqual(code, 1)
        data = json.loads(text)
        self.assertEqual(data["dependencies"], [])
        self.assertEqual(len(data["diagnostics"]), 1)

    def test_targets_with_ignore_config(self):
        config = self.root / "custom.yaml"
        config.write_text("ignore_targets:\n  - '*Tests'\nlog_level: error\n")
        code, text = self.run_cli(
            "targets", str(self.workspace_path), "--config", str(config), "--format", "json"
        )
        self.assertEqual(code, 0)
        names = [t["name"] for t in json.loads(text)["targets"]]
        self.assertEqual(names, ["App", "LibA", "Core", "Util"])

    def test_graph_dot(self):
        code, text = self.run_cli(
            "graph", str(self.workspace_path), "--dot", "--log-level", "error"
        )
        self.assertEqual(code, 0)
        self.assertIn('Core -> "Util.framework";', text)

    def test_invalid_path(self):
        code, _ = self.run_cli("targets", str(self.root / "App.txt"))
        self.assertEqual(code, 1)


def run_tests():
    """테스트 실행"""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestOpenStepParser))
    suite.addTests(loader.loadTestsFromTestCase(TestReadPbxproj))
    suite.addTests(loader.loadTestsFromTestCase(TestXcodeProjectLoad))
    suite.addTests(loader.loadTestsFromTestCase(TestProjectParser))
    suite.addTests(loader.loadTestsFromTestCase(TestResolutionOrder))
    suite.addTests(loader.loadTestsFromTestCase(TestWorkspace))
    suite.addTests(loader.loadTestsFromTestCase(TestWorkspaceRouting))
    suite.addTests(loader.loadTestsFromTestCase(TestDiagnostics))
    suite.addTests(loader.loadTestsFromTestCase(TestConfig))
    suite.addTests(loader.loadTestsFromTestCase(TestGraph))
    suite.addTests(loader.loadTestsFromTestCase(TestReporters))
    suite.addTests(loader.loadTestsFromTestCase(TestCLI))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    exit(run_tests())
