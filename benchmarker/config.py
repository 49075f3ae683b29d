from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from .runners import BENCHMARK_PLACEHOLDER as B
from .runners import Runner, RunnerGroup, RunnerKind

DEFAULT_BENCHMARKS: tuple[str, ...] = (
    "DeltaBlue",
    "FluidMotion",
    "Richards",
    "Tracer",
    "Havlak",
)

KNOWN_PLATFORMS: tuple[str, ...] = ("jvm", "web", "linux")


def is_linux() -> bool:
    return sys.platform.startswith("linux")


def default_platforms() -> tuple[str, ...]:
    return KNOWN_PLATFORMS if is_linux() else ("jvm", "web")


@dataclass(frozen=True)
class ToolPaths:
    """Locations of the benchmark suites and the tools used to run them."""

    defrac_benchmarks: str = "."
    ton80_benchmarks: str = "."
    defrac: str = "defrac"
    java: str = "java"
    dart: str = "dart"
    dart2js: str = "dart2js"
    d8: str = "d8"
    js: str = "js"

    @property
    def dart_source(self) -> str:
        return f"{self.ton80_benchmarks}/lib/src/{B}/dart/{B}.dart"

    @property
    def dart2js_output(self) -> str:
        return f"{self.dart_source}.js"

    @property
    def web_app(self) -> str:
        return f"{self.defrac_benchmarks}/target/web/defrac.benchmark/app.js"


@dataclass
class BenchmarkPlan:
    """Benchmarks to sweep and the runner groups measuring each of them."""

    benchmarks: list[str]
    groups: list[RunnerGroup] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.benchmarks:
            raise ValueError("BenchmarkPlan needs at least one benchmark")
        seen: set[str] = set()
        for runner in self.runners():
            if runner.name in seen:
                raise ValueError(f"duplicate runner name {runner.name!r}")
            seen.add(runner.name)

    def __iter__(self) -> Iterator[RunnerGroup]:
        return iter(self.groups)

    def runners(self) -> list[Runner]:
        return [runner for group in self.groups for runner in group.runners]

    def name_width(self) -> int:
        return max((len(runner.name) for runner in self.runners()), default=0)


def default_benchmark_plan(
    paths: ToolPaths,
    benchmarks: Sequence[str] = DEFAULT_BENCHMARKS,
    platforms: Iterable[str] | None = None,
) -> BenchmarkPlan:
    """Return the stock sweep: Dart VM, dart2js, hand-written JS and defrac."""

    selected = list(default_platforms() if platforms is None else platforms)
    unknown = [platform for platform in selected if platform not in KNOWN_PLATFORMS]
    if unknown:
        raise ValueError(f"unknown platform(s): {', '.join(unknown)}")

    groups = [
        RunnerGroup(
            label="dart",
            runners=(Runner("dart", RunnerKind.INTERPRETER, (paths.dart, paths.dart_source)),),
        ),
        RunnerGroup(
            label="dart2js",
            setup=((paths.dart2js, "-o", paths.dart2js_output, paths.dart_source),),
            runners=(
                Runner("dart2js:v8", RunnerKind.SCRIPT_ENGINE, (paths.d8, "-f", paths.dart2js_output)),
                Runner("dart2js:sM", RunnerKind.SCRIPT_ENGINE, (paths.js, "-f", paths.dart2js_output)),
            ),
        ),
        RunnerGroup(
            label="js",
            runners=(
                Runner("js:v8", RunnerKind.SCRIPT_ENGINE, (paths.d8, *_js_sources(paths))),
                Runner("js:sM", RunnerKind.SCRIPT_ENGINE, (paths.js, *_js_sources(paths))),
            ),
        ),
    ]
    groups.extend(_defrac_group(paths, platform) for platform in selected)
    return BenchmarkPlan(benchmarks=list(benchmarks), groups=groups)


def _js_sources(paths: ToolPaths) -> tuple[str, ...]:
    return (
        "-f",
        f"{paths.ton80_benchmarks}/lib/src/common/javascript/bench.js",
        "-f",
        f"{paths.ton80_benchmarks}/lib/src/{B}/javascript/{B}.js",
    )


def _defrac_group(paths: ToolPaths, platform: str) -> RunnerGroup:
    suite = paths.defrac_benchmarks
    if platform == "jvm":
        runners = (
            Runner(
                "defrac:jvm",
                RunnerKind.BYTECODE_RUNTIME,
                (paths.java, "-cp", f"{suite}/target/jvm", f"defrac.benchmark.{B}"),
            ),
        )
    elif platform == "web":
        runners = (
            Runner("defrac:v8", RunnerKind.SCRIPT_ENGINE, (paths.d8, "-f", paths.web_app)),
            Runner("defrac:sM", RunnerKind.SCRIPT_ENGINE, (paths.js, "-f", paths.web_app)),
        )
    else:
        runners = (Runner("defrac:c++", RunnerKind.NATIVE_BINARY, (f"{suite}/target/linux/app",)),)

    steps = (
        f"{platform}:clean",
        f"{platform}:config debug false",
        f"{platform}:config strictMode false",
        f"{platform}:config main defrac.benchmark.{B}",
        f"{platform}:compile",
    )
    setup = tuple((paths.defrac, "-p", suite, step) for step in steps)
    return RunnerGroup(label=f"defrac:{platform}", runners=runners, setup=setup)
