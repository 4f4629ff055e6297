import io
import unittest
from unittest import mock

from fun import syntax
from fun.syntax import Var, IntExp, BoolExp, Op, If, Fun, App, Let, Annot, C, Case, VarP, DataConstructor, IntTy, PLUS, MINUS, LE
from fun.environment import EMPTY
from fun.values import IntVal, Closure
from fun.diagnostics import Report, TooManyIssues, UnboundVariable, InvalidOperator, NotApplicable, OutOfFuel, InvalidLiteral
from fun.reducer import step, Continue, Done, Failed
from fun.executive import evaluate, trace, run

def _omega():
	""" A program that never finishes, in constant space. """
	loop = Fun("x", App(Var("loop"), [Var("x")]))
	return Let("loop", loop, App(Var("loop"), [IntExp(0)]))

def _countdown(n):
	""" Counts down to zero, leaving one pending addition per call. """
	body = If(Op(LE, Var("n"), IntExp(0)), IntExp(0), Op(PLUS, IntExp(1), App(Var("down"), [Op(MINUS, Var("n"), IntExp(1))])))
	return Let("down", Fun("n", body), App(Var("down"), [IntExp(n)]))

class Silence(Report):
	def __init__(self, **kwargs):
		super().__init__(**kwargs)
		self.complain_to_console = mock.Mock()

class StepTests(unittest.TestCase):
	""" One step at a time, with nothing hidden. """

	def test_literals_are_done(self):
		self.assertEqual(Done(IntVal(1)), step(IntExp(1), EMPTY))

	def test_function_captures_current_environment(self):
		env = EMPTY.extend("y", IntVal(2))
		outcome = step(Fun("x", Var("y")), env)
		self.assertIsInstance(outcome, Done)
		self.assertIsInstance(outcome.value, Closure)
		self.assertIs(env, outcome.value.env)

	def test_failures_come_back_as_outcomes(self):
		outcome = step(Var("X"), EMPTY)
		self.assertIsInstance(outcome, Failed)
		self.assertIsInstance(outcome.reason, UnboundVariable)
		self.assertEqual("UnboundVariable: Unbound variable X", outcome.describe())
		self.assertIsInstance(step(App(syntax.Val(IntVal(1)), [syntax.Val(IntVal(1))]), EMPTY).reason, NotApplicable)

	def test_bad_literal_comes_back_as_an_outcome(self):
		outcome = step(IntExp(True), EMPTY)
		self.assertIsInstance(outcome, Failed)
		self.assertIsInstance(outcome.reason, InvalidLiteral)
		self.assertEqual("InvalidLiteral: integer literal cannot hold True", outcome.describe())

	def test_non_function_let_settles_on_the_first_step(self):
		returns_f = Fun("x", Var("f"))
		outcome = step(Let("f", If(BoolExp(True), returns_f, IntExp(0)), Var("f")), EMPTY)
		self.assertIsInstance(outcome.expr, syntax.Bind)
		outcome = step(outcome.expr, outcome.env)
		self.assertIsInstance(outcome.expr, syntax.Bind)
		self.assertIs(returns_f, outcome.expr.bound)

	def test_empty_application_unwraps(self):
		callee = Var("f")
		outcome = step(App(callee, []), EMPTY)
		self.assertEqual(Continue(callee, EMPTY), outcome)

	def test_annotation_unwraps(self):
		inner = IntExp(1)
		self.assertEqual(Continue(inner, EMPTY), step(Annot(inner, IntTy), EMPTY))

	def test_left_operand_goes_first(self):
		outcome = step(Op(PLUS, Var("a"), Var("b")), EMPTY.extend("a", IntVal(1)))
		self.assertIsInstance(outcome, Continue)
		self.assertIsInstance(outcome.expr.lhs, syntax.Val)
		self.assertIsInstance(outcome.expr.rhs, Var)
		self.assertIsInstance(step(outcome.expr, outcome.env), Failed)

	def test_let_extends_the_environment(self):
		outcome = step(Let("x", syntax.Val(IntVal(1)), Var("x")), EMPTY)
		self.assertIsInstance(outcome, Continue)
		self.assertEqual(IntVal(1), outcome.env.resolve("x"))
		self.assertNotIn("x", EMPTY)

	def test_case_branch_runs_in_the_match_environment(self):
		outcome = step(Case(syntax.Val(IntVal(4)), [(VarP("n"), Var("n"))]), EMPTY)
		self.assertIsInstance(outcome, Continue)
		self.assertEqual({"n": IntVal(4)}, outcome.env.as_dict())

	def test_nullary_constructor(self):
		dc = DataConstructor("Unit")
		outcome = step(C(dc), EMPTY)
		self.assertEqual(dc, outcome.value.constructor)
		self.assertEqual((), outcome.value.fields)

class TraceTests(unittest.TestCase):

	def test_every_state_shows(self):
		states = list(trace(Op(PLUS, IntExp(1), IntExp(2))))
		self.assertEqual(3, len(states))
		self.assertTrue(all(isinstance(s, Continue) for s in states[:-1]))
		self.assertEqual(Done(IntVal(3)), states[-1])

	def test_failure_raises(self):
		with self.assertRaises(InvalidOperator):
			list(trace(Op(PLUS, IntExp(1), BoolExp(False))))

	def test_trace_agrees_with_evaluate(self):
		expr = Let("f", Fun("x", Op(PLUS, Var("x"), Var("x"))), App(Var("f"), [IntExp(21)]))
		self.assertEqual(list(trace(expr))[-1].value, evaluate(expr))

class FuelTests(unittest.TestCase):

	def test_divergence_is_stopped_by_fuel(self):
		with self.assertRaises(OutOfFuel) as cm:
			evaluate(_omega(), fuel=1000)
		self.assertEqual(1000, cm.exception.culprit)

	def test_enough_fuel_is_enough(self):
		self.assertEqual(IntVal(1), evaluate(IntExp(1), fuel=1))
		with self.assertRaises(OutOfFuel):
			evaluate(IntExp(1), fuel=0)
		self.assertEqual(IntVal(3), evaluate(Op(PLUS, IntExp(1), IntExp(2)), fuel=3))
		with self.assertRaises(OutOfFuel):
			evaluate(Op(PLUS, IntExp(1), IntExp(2)), fuel=2)

class RunTests(unittest.TestCase):

	def test_success(self):
		report = Silence()
		self.assertEqual(IntVal(3), run(Op(PLUS, IntExp(1), IntExp(2)), report))
		self.assertTrue(report.ok())

	def test_failure_is_reported(self):
		report = Silence()
		self.assertIsNone(run(Var("nope"), report))
		self.assertTrue(report.sick())
		with self.assertRaises(AssertionError):
			report.assert_no_issues("Expected a failure here.")
		report.complain_to_console.assert_called_once()

	def test_out_of_fuel_is_reported(self):
		report = Silence()
		self.assertIsNone(run(_omega(), report, fuel=50))
		self.assertTrue(report.sick())

	def test_deep_program_quietly(self):
		report = Silence()
		self.assertEqual(IntVal(400), run(_countdown(400), report))
		self.assertTrue(report.ok())
		self.assertFalse(report.narrating())

	def test_too_many_issues(self):
		report = Silence(max_issues=2)
		run(Var("a"), report)
		with self.assertRaises(TooManyIssues):
			run(Var("b"), report)

	def test_verbose_narrates_each_step(self):
		report = Report(verbose=1)
		with mock.patch("sys.stderr", new_callable=io.StringIO) as err:
			run(Op(PLUS, IntExp(1), IntExp(2)), report)
		text = err.getvalue()
		self.assertIn("step 1:", text)
		self.assertIn("step 3: done: 3", text)
		self.assertTrue(report.narrating())

	def test_quiet_by_default(self):
		with mock.patch("sys.stderr", new_callable=io.StringIO) as err:
			run(Op(PLUS, IntExp(1), IntExp(2)), Report())
		self.assertEqual("", err.getvalue())

	def test_complaints_reach_the_console(self):
		report = Report()
		run(Var("nope"), report)
		with mock.patch("sys.stderr", new_callable=io.StringIO) as err:
			report.complain_to_console()
		self.assertIn("UnboundVariable", err.getvalue())
		report.reset()
		self.assertTrue(report.ok())

if __name__ == '__main__':
	unittest.main()
