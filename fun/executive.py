"""
The driver: keep stepping until a value turns up.

This is the only loop in the evaluator that might not end. The language
can express divergence, so nothing here bounds the number of steps
unless the caller supplies some fuel.
"""
from typing import Iterator, Optional, Union
from . import syntax
from .environment import Environment, EMPTY
from .values import FunValue
from .reducer import step, Continue, Done, Failed
from .diagnostics import Report, EvaluationError, OutOfFuel

def trace(expr:syntax.Expression, env:Environment=EMPTY, fuel:Optional[int]=None) -> Iterator[Union[Continue, Done]]:
	"""
	Yield each intermediate state, and finally the Done outcome.
	A failure comes out as the exception that caused it.
	"""
	count = 0
	while True:
		if fuel is not None and count >= fuel:
			raise OutOfFuel(fuel)
		outcome = step(expr, env)
		count += 1
		if isinstance(outcome, Failed):
			raise outcome.reason
		yield outcome
		if isinstance(outcome, Done):
			return
		expr, env = outcome

def evaluate(expr:syntax.Expression, env:Environment=EMPTY, fuel:Optional[int]=None) -> FunValue:
	outcome = None
	for outcome in trace(expr, env, fuel):
		pass
	return outcome.value

def run(expr:syntax.Expression, report:Report, env:Environment=EMPTY, fuel:Optional[int]=None) -> Optional[FunValue]:
	""" Evaluate for an audience: failures go in the report, and a verbose report narrates every step. """
	report.info("Evaluating", expr)
	outcome = None
	try:
		for number, outcome in enumerate(trace(expr, env, fuel), 1):
			if report.narrating():
				report.info("step %d: %s" % (number, _describe(outcome)))
	except OutOfFuel as ex:
		report.ran_out_of_fuel(expr, ex)
		return None
	except EvaluationError as ex:
		report.failed(expr, ex)
		return None
	return outcome.value

def _describe(outcome:Union[Continue, Done]) -> str:
	if isinstance(outcome, Done):
		return "done: %s" % outcome.value
	return "%s  in  %r" % (outcome.expr, outcome.env)
