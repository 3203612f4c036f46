# SPDX-License-Identifier: MIT
"""Makefile build plan generator.

Builds the plan that is piped into `make -f -`. The plan for a target
looks like:

    # Build plan for demo (debug)
    CC := clang
    CFLAGS := -std=c11 -Wall ... -Og -g ...
    ...
    ARTIFACT := build/debug/demo
    OBJECTS := build/debug/obj/main.c.o

    .PHONY: all
    all: $(ARTIFACT)

    $(ARTIFACT): $(OBJECTS)
    	@$(LD) $(OBJECTS) -o $@ $(LDFLAGS)

    build/debug/obj/%.c.o: src/%.c
    	@$(CC) $(CFLAGS) -c $< -o $@

    build/debug/obj/main.c.o: src/main.c include/util.h

Everything is derived from the descriptor, the toolchain and a sorted
source scan, so synthesizing twice over an unchanged tree yields the
same text.
"""

from __future__ import annotations

import logging
from pathlib import Path

from barge.core.dependencies import extract_dependencies
from barge.core.descriptor import ArtifactKind, ProjectDescriptor
from barge.core.errors import LibraryResolutionError, ToolInvocationError
from barge.core.flags import FlagSet, assemble
from barge.core.plan import BuildPlan, Rule
from barge.core.sources import DiscoveryMode, Language, SourceFile, discover, has_language
from barge.core.target import SOURCE_DIR, BuildTarget
from barge.generators.generator import BaseGenerator
from barge.packages.pkgconfig import resolve_libraries
from barge.toolchains import resolve_toolchain
from barge.toolchains.toolchain import Toolchain
from barge.util.commands import CommandRunner, SubprocessCommandRunner

logger = logging.getLogger(__name__)

COB_CONFIG = "cob-config"
ANALYZER = "clang-tidy"

# Language -> (source extension, compiler variable, flags variable)
COMPILE_RULES: tuple[tuple[Language, str, str, str], ...] = (
    (Language.C, ".c", "CC", "CFLAGS"),
    (Language.CPP, ".cpp", "CXX", "CXXFLAGS"),
    (Language.ASSEMBLY, ".s", "AS", ""),
    (Language.FORTRAN, ".f90", "FC", "FFLAGS"),
    (Language.COBOL, ".cob", "COBC", "COBOLFLAGS"),
)

LINK_RECIPES: dict[ArtifactKind, str] = {
    ArtifactKind.EXECUTABLE: "@$(LD) $(OBJECTS) -o $@ $(LDFLAGS)",
    ArtifactKind.SHARED_LIBRARY: "@$(LD) -shared $(OBJECTS) -o $@ $(LDFLAGS)",
    ArtifactKind.STATIC_LIBRARY: "@$(AR) rcs $@ $(OBJECTS)",
}


def cobol_runtime_flags(runner: CommandRunner) -> str:
    """Link flags of the GnuCOBOL runtime (`cob-config --libs`)."""
    command = [COB_CONFIG, "--libs"]
    try:
        result = runner.run(command)
    except ToolInvocationError as e:
        raise LibraryResolutionError("libcob", f"{COB_CONFIG} is not available ({e})") from e
    if not result.ok:
        reason = result.stderr.strip() or f"{COB_CONFIG} exited with status {result.returncode}"
        raise LibraryResolutionError("libcob", reason)
    return result.stdout.strip()


class MakefileGenerator(BaseGenerator):
    """Generator for Makefile build plans.

    Example:
        generator = MakefileGenerator(runner)
        plan = generator.synthesize(descriptor, BuildTarget.DEBUG, Path("."))
        print(plan.render())
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        super().__init__("make")
        self._runner = runner or SubprocessCommandRunner()

    def synthesize(
        self, descriptor: ProjectDescriptor, target: BuildTarget, root: Path
    ) -> BuildPlan:
        """Build plan whose 'all' rule produces the project artifact."""
        toolchain = resolve_toolchain(descriptor.effective_toolset)
        sources = discover(DiscoveryMode.ALL, root)
        logger.debug("Discovered %d source files", len(sources))

        library_flags = resolve_libraries(
            descriptor.effective("external_libraries"), self._runner
        )
        runtime_flags = ""
        if has_language(sources, Language.COBOL):
            runtime_flags = cobol_runtime_flags(self._runner)
        flags = assemble(descriptor, target, library_flags, sources, runtime_flags)

        plan = BuildPlan(comment=f"Build plan for {descriptor.name} ({target})")
        self._add_variables(plan, descriptor, target, toolchain, flags, sources)
        self._add_rules(plan, descriptor, target)
        for language in (Language.C, Language.CPP):
            plan.add_fragment(
                extract_dependencies(
                    sources, target, language, toolchain, self._runner, cwd=root
                )
            )
        return plan

    def _add_variables(
        self,
        plan: BuildPlan,
        descriptor: ProjectDescriptor,
        target: BuildTarget,
        toolchain: Toolchain,
        flags: FlagSet,
        sources: list[SourceFile],
    ) -> None:
        plan.set("TARGET", target.value)
        plan.set("BUILD_DIR", target.binary_dir)
        plan.set("OBJ_DIR", target.object_dir)
        plan.set("AS", toolchain.assembler)
        plan.set("CC", toolchain.c_compiler)
        plan.set("CFLAGS", flags.c)
        plan.set("CXX", toolchain.cpp_compiler)
        plan.set("CXXFLAGS", flags.cpp)
        plan.set("FC", toolchain.fortran_compiler)
        plan.set("FFLAGS", flags.fortran)
        plan.set("COBC", toolchain.cobol_compiler)
        plan.set("COBOLFLAGS", flags.cobol)
        plan.set("LD", toolchain.linker)
        plan.set("AR", toolchain.archiver)
        plan.set("LDFLAGS", flags.link)
        plan.set("ARTIFACT", f"{target.binary_dir}/{descriptor.artifact_name}")
        objects = [target.object_path(s.path) for s in sources if s.is_compiled]
        plan.set("OBJECTS", " ".join(objects))

    def _add_rules(
        self, plan: BuildPlan, descriptor: ProjectDescriptor, target: BuildTarget
    ) -> None:
        plan.add_rule(Rule(["all"], ["$(ARTIFACT)"], phony=True))
        plan.add_rule(
            Rule(
                ["$(ARTIFACT)"],
                ["$(OBJECTS)"],
                recipe=[
                    "@mkdir -p $(@D)",
                    "@echo \"Linking $@\"",
                    LINK_RECIPES[descriptor.project_type],
                ],
            )
        )
        for _language, extension, compiler, flags_var in COMPILE_RULES:
            flags = f" $({flags_var})" if flags_var else ""
            plan.add_rule(
                Rule(
                    [f"{target.object_dir}/%{extension}.o"],
                    [f"{SOURCE_DIR}/%{extension}"],
                    recipe=[
                        "@mkdir -p $(@D)",
                        "@echo \"Compiling $<\"",
                        f"@$({compiler}){flags} -c $< -o $@",
                    ],
                )
            )

    def synthesize_analyze(self, descriptor: ProjectDescriptor, root: Path) -> BuildPlan:
        """Build plan whose 'analyze' rule runs static analysis on C/C++."""
        sources = discover(DiscoveryMode.COMPILED_ONLY, root)
        c_sources = [s.path for s in sources if s.language is Language.C]
        cpp_sources = [s.path for s in sources if s.language is Language.CPP]

        plan = BuildPlan(comment=f"Analysis plan for {descriptor.name}")
        plan.set("ANALYZER", ANALYZER)
        plan.set("C_STD", descriptor.effective("c_standard"))
        plan.set("CXX_STD", descriptor.effective("cpp_standard"))
        plan.set("C_SOURCES", " ".join(c_sources))
        plan.set("CPP_SOURCES", " ".join(cpp_sources))

        recipe: list[str] = []
        if c_sources:
            recipe.append("@$(ANALYZER) --quiet $(C_SOURCES) -- -std=$(C_STD) -Iinclude -Isrc")
        if cpp_sources:
            recipe.append(
                "@$(ANALYZER) --quiet $(CPP_SOURCES) -- -std=$(CXX_STD) -Iinclude -Isrc"
            )
        if not recipe:
            recipe.append("@echo \"No C or C++ sources to analyze\"")
        plan.add_rule(Rule(["analyze"], recipe=recipe, phony=True))
        return plan


def synthesize(
    descriptor: ProjectDescriptor,
    target: BuildTarget,
    *,
    root: Path | str = ".",
    runner: CommandRunner | None = None,
) -> BuildPlan:
    """Synthesize the build plan for a project and target."""
    return MakefileGenerator(runner).synthesize(descriptor, target, Path(root))


def synthesize_analyze(
    descriptor: ProjectDescriptor,
    *,
    root: Path | str = ".",
    runner: CommandRunner | None = None,
) -> BuildPlan:
    """Synthesize the static analysis plan for a project."""
    return MakefileGenerator(runner).synthesize_analyze(descriptor, Path(root))
