# SPDX-License-Identifier: MIT
"""Structured build plan.

A BuildPlan is an ordered list of variables and rules plus verbatim
fragments (the compiler-generated dependency rules). Composition code
appends to it; only render() knows about Makefile syntax.

Example:
    plan = BuildPlan(comment="demo")
    plan.set("CC", "clang")
    plan.add_rule(Rule(["all"], ["$(ARTIFACT)"], phony=True))
    text = plan.render()
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Variable:
    """A simply-expanded make variable (NAME := value)."""

    name: str
    value: str

    def render(self) -> str:
        if not self.value:
            return f"{self.name} :="
        return f"{self.name} := {self.value}"


@dataclass(frozen=True)
class Rule:
    """A make rule.

    Attributes:
        targets: Rule targets (may be patterns such as 'obj/%.c.o').
        prerequisites: Normal prerequisites.
        recipe: Recipe lines, each rendered after a tab.
        phony: Declare the targets .PHONY.
        order_only: Order-only prerequisites (after '|').
    """

    targets: Sequence[str]
    prerequisites: Sequence[str] = ()
    recipe: Sequence[str] = ()
    phony: bool = False
    order_only: Sequence[str] = ()

    def render(self) -> str:
        lines: list[str] = []
        if self.phony:
            lines.append(f".PHONY: {' '.join(self.targets)}")
        head = f"{' '.join(self.targets)}:"
        if self.prerequisites:
            head += " " + " ".join(self.prerequisites)
        if self.order_only:
            head += " | " + " ".join(self.order_only)
        lines.append(head)
        lines.extend(f"\t{line}" for line in self.recipe)
        return "\n".join(lines)


@dataclass
class BuildPlan:
    """Textual build description handed to the build executor.

    Attributes:
        comment: Header comment (project name and target).
        variables: Variables in definition order.
        rules: Rules in definition order; the first one is make's default.
        fragments: Verbatim text appended after the rules.
    """

    comment: str = ""
    variables: list[Variable] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)
    fragments: list[str] = field(default_factory=list)

    def set(self, name: str, value: str) -> None:
        """Define a variable, replacing an earlier definition in place."""
        for i, variable in enumerate(self.variables):
            if variable.name == name:
                self.variables[i] = Variable(name, value)
                return
        self.variables.append(Variable(name, value))

    def get(self, name: str) -> str | None:
        for variable in self.variables:
            if variable.name == name:
                return variable.value
        return None

    def add_rule(self, rule: Rule) -> None:
        self.rules.append(rule)

    def add_fragment(self, text: str) -> None:
        """Append verbatim text; blank fragments are ignored."""
        if text.strip():
            self.fragments.append(text.rstrip())

    def find_rule(self, target: str) -> Rule | None:
        for rule in self.rules:
            if target in rule.targets:
                return rule
        return None

    def render(self) -> str:
        """Render the plan as Makefile text ending with a newline."""
        sections: list[str] = []
        if self.comment:
            sections.append("\n".join(f"# {line}" for line in self.comment.splitlines()))
        if self.variables:
            sections.append("\n".join(v.render() for v in self.variables))
        sections.extend(rule.render() for rule in self.rules)
        sections.extend(self.fragments)
        return "\n\n".join(sections) + "\n"
