import itertools
import sys

import pytest

from lox.errors import SourceLocation
from lox.interpreter import STACK_OVERFLOW, Interpreter
from lox.pipeline import PARSE_ERRORS_MESSAGE, SCAN_ERRORS_MESSAGE, run
from lox.reporter import CollectingReporter


#runs the whole pipeline and hands back what was reported
def run_source(source: str) -> CollectingReporter:
    reporter = CollectingReporter()
    run(reporter, source)
    return reporter


def printed(reporter: CollectingReporter) -> list[str]:
    return [message for message in reporter.messages if message.startswith("[print] ")]


#successful programs print without any diagnostics
def assert_prints(source: str, *expected: str) -> None:
    reporter = run_source(source)
    assert reporter.diagnostics == []
    assert printed(reporter) == [f"[print] {value}" for value in expected]


@pytest.mark.parametrize(
    "source, expected",
    [
        ("print 1 + 1;", "2"),
        ('print "a" + "b";', '"ab"'),
        ("print 7 / 2;", "3.5"),
        ("print -(3 - 10) * 2;", "14"),
        ("print 1 < 2;", "true"),
        ("print 2 <= 1;", "false"),
        ("print nil;", "nil"),
        ("print !nil;", "true"),
        ("print !0;", "false"),
        ('print "" == "";', "true"),
        ("print 1 == true;", "false"),
        ("print nil == false;", "false"),
        ("print nil == nil;", "true"),
        ('print 1 != "1";', "true"),
        ("print 1 / 0;", "inf"),
        ("print -1 / 0;", "-inf"),
        ("print 0 / 0;", "NaN"),
    ],
)
def test_expressions(source: str, expected: str) -> None:
    assert_prints(source, expected)


#`and`/`or` return an operand and skip the right side when they can
def test_logical_operators() -> None:
    assert_prints(
        """
        print nil or "default";
        print 1 and 2;
        print false and undefined;
        print true or undefined;
        """,
        '"default"',
        "2",
        "false",
        "true",
    )


def test_variables_and_blocks() -> None:
    assert_prints(
        """
        var a = "global";
        var b;
        {
            var a = "inner";
            print a;
            b = a;
        }
        print a;
        print b;
        """,
        '"inner"',
        '"global"',
        '"inner"',
    )


def test_control_flow() -> None:
    assert_prints(
        """
        var i = 0;
        while (i < 3) {
            if (i == 1) print "one"; else print i;
            i = i + 1;
        }
        for (var j = 0; j < 2; j = j + 1) print j;
        """,
        "0",
        '"one"',
        "2",
        "0",
        "1",
    )


def test_functions_and_recursion() -> None:
    assert_prints(
        """
        fun fib(n) {
            if (n < 2) return n;
            return fib(n - 1) + fib(n - 2);
        }
        fun nothing() {}
        print fib(10);
        print nothing();
        print fib;
        print clock;
        """,
        "55",
        "nil",
        '"fun fib"',
        '"native fun clock"',
    )


#two counters made by the same factory keep separate state
def test_closures_are_independent() -> None:
    assert_prints(
        """
        fun makeCounter() {
            var count = 0;
            fun counter() {
                count = count + 1;
                return count;
            }
            return counter;
        }
        var first = makeCounter();
        var second = makeCounter();
        print first();
        print first();
        print second();
        """,
        "1",
        "2",
        "1",
    )


#a closure keeps the binding it resolved to, even when a later declaration shadows it
def test_closure_binding_is_static() -> None:
    assert_prints(
        """
        var a = "global";
        {
            fun show() { print a; }
            show();
            var a = "block";
            show();
        }
        """,
        '"global"',
        '"global"',
    )


def test_classes_fields_and_methods() -> None:
    assert_prints(
        """
        class Bacon {
            init() { this.how = "chewy"; }
            eat() { return "Crunch " + this.how; }
        }
        var b = Bacon();
        print b.how;
        print b.eat();
        b.how = "crispy";
        print b.eat();
        print Bacon;
        print b;
        """,
        '"chewy"',
        '"Crunch chewy"',
        '"Crunch crispy"',
        '"class Bacon"',
        '"instance of Bacon"',
    )


#bound methods remember their receiver
def test_bound_method_keeps_this() -> None:
    assert_prints(
        """
        class Person {
            init(name) { this.name = name; }
            greet() { return "hi " + this.name; }
        }
        var greet = Person("ada").greet;
        print greet();
        """,
        '"hi ada"',
    )


def test_inheritance_and_super() -> None:
    assert_prints(
        """
        class Doughnut {
            cook() { return "Fry until golden brown"; }
            name() { return "doughnut"; }
        }
        class BostonCream < Doughnut {
            cook() { return super.cook() + ", pipe full of " + this.filling(); }
            filling() { return "custard"; }
        }
        var d = BostonCream();
        print d.cook();
        print d.name();
        """,
        '"Fry until golden brown, pipe full of custard"',
        '"doughnut"',
    )


#`super` is tied to the class that contains the call, not the receiver's class
def test_super_uses_static_class() -> None:
    assert_prints(
        """
        class A { method() { return "A"; } }
        class B < A {
            method() { return "B"; }
            test() { return super.method(); }
        }
        class C < B {}
        print C().test();
        """,
        '"A"',
    )


#initialisers are inherited and always hand back the instance
def test_initializer_behaviour() -> None:
    assert_prints(
        """
        class Base { init(x) { this.x = x; return; } }
        class Derived < Base {}
        var d = Derived(4);
        print d.x;
        print d.init(5) == d;
        print d.x;
        """,
        "4",
        "true",
        "5",
    )


def test_instances_compare_by_identity() -> None:
    assert_prints(
        """
        class Point {}
        var a = Point();
        var b = Point();
        print a == a;
        print a == b;
        """,
        "true",
        "false",
    )


def test_mixed_addition_is_an_error() -> None:
    reporter = run_source('"hello," + 10 ;')
    assert len(reporter.diagnostics) == 1
    diagnostic = reporter.diagnostics[0]
    assert diagnostic.message == "Operands must be two numbers or two strings"
    assert diagnostic.start == SourceLocation(0, 0)
    assert diagnostic.end == SourceLocation(0, 13)
    assert reporter.has_message("Operands must be two numbers or two strings")


def test_non_numeric_operand() -> None:
    reporter = run_source('"hello" - true ; ')
    diagnostic = reporter.diagnostics[0]
    assert diagnostic.message == "Operand should be a number"
    assert diagnostic.start == SourceLocation(0, 0)
    assert diagnostic.end == SourceLocation(0, 14)


#the span points at the innermost failing expression
def test_nested_operand_error_location() -> None:
    reporter = run_source('((10 - 5) + 1) / (2 * "fred") ;')
    diagnostic = reporter.diagnostics[0]
    assert diagnostic.message == "Operand should be a number"
    assert diagnostic.start == SourceLocation(0, 18)
    assert diagnostic.end == SourceLocation(0, 28)


def test_unary_minus_requires_number() -> None:
    reporter = run_source('print -"a";')
    assert reporter.has_diagnostic("Operand should be a number")


#a failing statement is skipped and the next top-level statement still runs
def test_runtime_error_does_not_stop_later_statements() -> None:
    reporter = run_source('print "a" + 1; print "after";')
    assert reporter.has_diagnostic("Operands must be two numbers or two strings")
    assert printed(reporter) == ['[print] "after"']


#an error deep inside calls unwinds the whole statement
def test_runtime_error_unwinds_calls() -> None:
    reporter = run_source(
        """
        fun inner() { return nil + 1; }
        fun outer() { print "before"; inner(); print "not reached"; }
        outer();
        print "next";
        """
    )
    assert reporter.has_diagnostic("Operands must be two numbers or two strings")
    assert printed(reporter) == ['[print] "before"', '[print] "next"']


@pytest.mark.parametrize(
    "source, message",
    [
        ("print missing;", "Undefined variable 'missing'"),
        ("missing = 1;", "Undefined variable 'missing'"),
        ('"text"();', "Can only call functions and classes"),
        ("fun f(a) {} f();", "Expected 1 arguments but got 0"),
        ("fun f(a) {} f(1, 2);", "Expected 1 arguments but got 2"),
        ("var x = 1; print x.field;", "Only instances have fields"),
        ("var x = 1; x.field = 2;", "Only instances have fields"),
        ("class A {} print A().missing;", "Undefined property 'missing'"),
        ("var NotClass = 1; class B < NotClass {}", "Superclass must be a class"),
        ("print this;", "Cannot use 'this' outside of a class"),
        ("class A {} class B < A { m() { return super.missing(); } } B().m();", "Undefined property 'missing'"),
    ],
)
def test_runtime_errors(source: str, message: str) -> None:
    reporter = run_source(source)
    assert reporter.has_diagnostic(message)
    assert reporter.has_message(message)


#arity mismatch on a class call produces nothing but the diagnostic
@pytest.mark.parametrize("arguments, count", [("", 0), ("1, 2", 2)])
def test_class_arity_mismatch(arguments: str, count: int) -> None:
    reporter = run_source(
        f"""
        class Counter {{ init(start) {{ this.value = start; print "made"; }} }}
        var c = Counter({arguments});
        """
    )
    assert reporter.has_diagnostic(f"Expected 1 arguments but got {count}")
    assert printed(reporter) == []


#fields can be added at any time and are then readable
def test_setting_undeclared_field() -> None:
    assert_prints(
        """
        class Box {}
        var box = Box();
        box.content = "cat";
        print box.content;
        """,
        '"cat"',
    )


def test_stops_before_parsing_on_scan_errors() -> None:
    reporter = run_source("print 1; @")
    assert reporter.has_diagnostic("Unexpected character")
    assert reporter.has_message(SCAN_ERRORS_MESSAGE)
    assert printed(reporter) == []


def test_stops_before_interpreting_on_parse_errors() -> None:
    reporter = run_source("print 1; print")
    assert reporter.has_message(PARSE_ERRORS_MESSAGE)
    assert printed(reporter) == []


#resolver problems are reported but the program still runs
def test_resolver_errors_do_not_prevent_execution() -> None:
    reporter = run_source('print "first"; { var a = a; } print "last";')
    assert reporter.has_diagnostic("Cannot read local variable in its own initialiser")
    assert reporter.has_diagnostic("Undefined variable 'a'")
    assert printed(reporter) == ['[print] "first"', '[print] "last"']


#a stray top-level return is diagnosed and the statements after it still run
def test_top_level_return_does_not_stop_the_program() -> None:
    reporter = run_source('return 1; print "after";')
    assert reporter.has_diagnostic("Cannot return from top-level code")
    assert printed(reporter) == ['[print] "after"']


#recursion well past Python's default limit still works
def test_deep_recursion() -> None:
    assert_prints(
        """
        fun count(n) { if (n == 0) return 0; return count(n - 1); }
        print count(1000);
        print "after";
        """,
        "0",
        '"after"',
    )


#runaway recursion is reported and the session carries on in the global frame
def test_unbounded_recursion_reports_stack_overflow() -> None:
    reporter = run_source('fun loop() { loop(); } loop(); var x = "after"; print x;')
    assert reporter.has_diagnostic(STACK_OVERFLOW)
    assert reporter.has_message(STACK_OVERFLOW)
    assert printed(reporter) == ['[print] "after"']


def test_recursion_limit_is_restored() -> None:
    before = sys.getrecursionlimit()
    run_source("fun loop() { loop(); } loop();")
    assert sys.getrecursionlimit() == before


#one interpreter and one id source carry globals and closures across separate runs
def test_state_persists_across_runs() -> None:
    reporter = CollectingReporter()
    interpreter = Interpreter(reporter)
    ids = itertools.count(1)
    run(reporter, "fun make() { var n = 0; fun inc() { n = n + 1; return n; } return inc; }", interpreter, ids)
    run(reporter, "var counter = make();", interpreter, ids)
    run(reporter, "counter();", interpreter, ids)
    run(reporter, "print counter();", interpreter, ids)
    assert reporter.diagnostics == []
    assert printed(reporter) == ["[print] 2"]


def test_trace_output(capsys: pytest.CaptureFixture[str]) -> None:
    reporter = CollectingReporter()
    run(reporter, "var a = 1; print a;", Interpreter(reporter, trace=True))
    out = capsys.readouterr().out
    assert "[trace] (var a = 1)" in out
    assert "[trace] (print a)" in out
