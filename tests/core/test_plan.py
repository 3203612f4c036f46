# SPDX-License-Identifier: MIT
"""Tests for barge.core.plan module."""

from barge.core.plan import BuildPlan, Rule, Variable


class TestVariable:
    def test_render(self):
        assert Variable("CC", "clang").render() == "CC := clang"

    def test_render_empty(self):
        """Test that an empty value has no trailing space."""
        assert Variable("LDFLAGS", "").render() == "LDFLAGS :="


class TestRule:
    """Tests for rule rendering."""

    def test_simple(self):
        rule = Rule(["out"], ["a.o", "b.o"], recipe=["@ld a.o b.o -o out"])
        assert rule.render() == "out: a.o b.o\n\t@ld a.o b.o -o out"

    def test_phony(self):
        rule = Rule(["all"], ["$(ARTIFACT)"], phony=True)
        assert rule.render() == ".PHONY: all\nall: $(ARTIFACT)"

    def test_order_only(self):
        rule = Rule(["obj/a.o"], ["a.c"], order_only=["obj"])
        assert rule.render() == "obj/a.o: a.c | obj"

    def test_no_prerequisites(self):
        assert Rule(["clean"], recipe=["rm -rf build"]).render() == "clean:\n\trm -rf build"


class TestBuildPlan:
    """Tests for the plan builder."""

    def test_set_replaces_in_place(self):
        plan = BuildPlan()
        plan.set("A", "1")
        plan.set("B", "2")
        plan.set("A", "3")
        assert [(v.name, v.value) for v in plan.variables] == [("A", "3"), ("B", "2")]
        assert plan.get("A") == "3"
        assert plan.get("C") is None

    def test_blank_fragments_ignored(self):
        plan = BuildPlan()
        plan.add_fragment("   \n")
        plan.add_fragment("a.o: a.c a.h\n")
        assert plan.fragments == ["a.o: a.c a.h"]

    def test_find_rule(self):
        plan = BuildPlan()
        rule = Rule(["all"], phony=True)
        plan.add_rule(rule)
        assert plan.find_rule("all") is rule
        assert plan.find_rule("missing") is None

    def test_render(self):
        """Test section order: comment, variables, rules, fragments."""
        plan = BuildPlan(comment="Build plan for demo (debug)")
        plan.set("CC", "clang")
        plan.set("CFLAGS", "")
        plan.add_rule(Rule(["all"], ["demo"], phony=True))
        plan.add_fragment("main.o: main.c")
        assert plan.render() == (
            "# Build plan for demo (debug)\n"
            "\n"
            "CC := clang\n"
            "CFLAGS :=\n"
            "\n"
            ".PHONY: all\n"
            "all: demo\n"
            "\n"
            "main.o: main.c\n"
        )

    def test_render_empty(self):
        assert BuildPlan().render() == "\n"
