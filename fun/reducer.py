"""
Small-step reduction: one rewrite of an (expression, environment) pair at a time.

Each step either hands back a new pair to carry on with, a finished value,
or the reason it cannot go on. Internally a failure is an exception, so that
it unwinds out of however deep the step happened to be; the public `step`
turns that into a Failed outcome.

Order of evaluation is fixed: left operand before right, each argument
before the function it goes to, the scrutinee before any pattern is tried.
A sub-expression whose step changes environment gets wrapped as `Closed`
so the change stays with that sub-expression and its siblings never see it.

A rule that must first reduce some part of its node answers with Descend.
The driver in `_step` follows those down to the one node that can actually
rewrite, then plugs the result back in on the way up. It does this with a
list rather than the Python stack, so a term may nest as deep as memory allows.
"""
import operator
from typing import Callable, NamedTuple, Union
from . import syntax
from .environment import Environment
from .values import FunValue, IntVal, BoolVal, Closure, Constructed
from .matcher import match
from .diagnostics import EvaluationError, UnboundVariable, InvalidOperator, NotApplicable, NoMatchingCase, InvalidLiteral

ENV = Environment

class Continue(NamedTuple):
	expr: syntax.Expression
	env: ENV

class Done(NamedTuple):
	value: FunValue

class Failed(NamedTuple):
	reason: EvaluationError
	def describe(self) -> str: return self.reason.describe()

STEP = Union[Continue, Done, Failed]

class Descend(NamedTuple):
	""" Step `expr` under `env` first; `plug` turns that outcome into the parent's. """
	expr: syntax.Expression
	env: ENV
	plug: Callable[[Union[Continue, Done]], Union[Continue, Done]]

PRIMITIVE_BINARY = {
	syntax.PLUS : operator.add,
	syntax.MINUS : operator.sub,
	syntax.TIMES : operator.mul,
	syntax.GT : operator.gt,
	syntax.GE : operator.ge,
	syntax.LT : operator.lt,
	syntax.LE : operator.le,
}

def step(expr:syntax.Expression, env:ENV) -> STEP:
	try: return _step(expr, env)
	except EvaluationError as ex: return Failed(ex)

def _step(expr:syntax.Expression, env:ENV) -> Union[Continue, Done]:
	plugs = []
	while True:
		assert isinstance(env, Environment), type(env)
		try: fn = STEP_METHODS[type(expr)]
		except KeyError: raise NotImplementedError(type(expr), expr)
		outcome = fn(expr, env)
		if not isinstance(outcome, Descend): break
		plugs.append(outcome.plug)
		expr, env = outcome.expr, outcome.env
	while plugs:
		outcome = plugs.pop()(outcome)
	return outcome

def _into(part:syntax.Expression, env:ENV, rebuild:Callable[[syntax.Expression], syntax.Expression]) -> Descend:
	""" Step one part of a node, in the node's own environment, and rebuild the node around the result. """
	def plug(outcome):
		if isinstance(outcome, Done): hole = syntax.Val(outcome.value)
		else: hole = _enclose(outcome.expr, outcome.env, env)
		return Continue(rebuild(hole), env)
	return Descend(part, env, plug)

def _enclose(expr:syntax.Expression, inner:ENV, outer:ENV) -> syntax.Expression:
	if inner is outer or isinstance(expr, (syntax.Val, syntax.Closed)): return expr
	return syntax.Closed(expr, inner)

def apply_operator(op:str, lhs:FunValue, rhs:FunValue) -> FunValue:
	if not (isinstance(lhs, IntVal) and isinstance(rhs, IntVal)):
		raise InvalidOperator(op, lhs, rhs)
	result = PRIMITIVE_BINARY[op](lhs.value, rhs.value)
	return BoolVal(result) if op in syntax.COMPARISON else IntVal(result)

###############################################################################

def _step_var(expr:syntax.Var, env:ENV):
	try: return Done(env.resolve(expr.name))
	except KeyError: raise UnboundVariable(expr.name) from None

def _step_int_exp(expr:syntax.IntExp, env:ENV):
	if type(expr.value) is not int: raise InvalidLiteral("integer", expr.value)
	return Done(IntVal(expr.value))

def _step_bool_exp(expr:syntax.BoolExp, env:ENV):
	if type(expr.value) is not bool: raise InvalidLiteral("boolean", expr.value)
	return Done(BoolVal(expr.value))

def _step_op(expr:syntax.Op, env:ENV):
	if not isinstance(expr.lhs, syntax.Val):
		return _into(expr.lhs, env, lambda lhs: syntax.Op(expr.op, lhs, expr.rhs))
	if not isinstance(expr.rhs, syntax.Val):
		return _into(expr.rhs, env, lambda rhs: syntax.Op(expr.op, expr.lhs, rhs))
	return Done(apply_operator(expr.op, expr.lhs.value, expr.rhs.value))

def _step_if(expr:syntax.If, env:ENV):
	if not isinstance(expr.condition, syntax.Val):
		return _into(expr.condition, env, lambda condition: syntax.If(condition, expr.then_part, expr.else_part))
	test = expr.condition.value
	if test == BoolVal(True): return Continue(expr.then_part, env)
	if test == BoolVal(False): return Continue(expr.else_part, env)
	raise NoMatchingCase(test)

def _step_fun(expr:syntax.Fun, env:ENV):
	return Done(Closure(expr.param, expr.body, env))

def _step_app(expr:syntax.App, env:ENV):
	if not expr.args: return Continue(expr.callee, env)
	arg, rest = expr.args[0], expr.args[1:]
	if not isinstance(arg, syntax.Val):
		return _into(arg, env, lambda arg: syntax.App(expr.callee, (arg,) + rest))
	if not isinstance(expr.callee, syntax.Val):
		return _into(expr.callee, env, lambda callee: syntax.App(callee, expr.args))
	callee = expr.callee.value
	if isinstance(callee, Constructed):
		result = callee.append(arg.value)
		if rest: return Continue(syntax.App(syntax.Val(result), rest), env)
		return Done(result)
	if isinstance(callee, Closure):
		inner = callee.env.extend(callee.param, arg.value)
		if rest: return Continue(syntax.App(syntax.Closed(callee.body, inner), rest), env)
		return Continue(callee.body, inner)
	raise NotApplicable(callee)

def _step_let(expr:syntax.Let, env:ENV):
	# Whether the binding is recursive is settled here, on the bound expression as written.
	bound = syntax.strip_annotations(expr.bound)
	if isinstance(bound, syntax.Fun):
		closure = Closure.recursive(expr.name, bound, env)
		return Continue(expr.body, env.extend(expr.name, closure))
	return _step_bind(syntax.Bind(expr.name, bound, expr.body), env)

def _step_bind(expr:syntax.Bind, env:ENV):
	if isinstance(expr.bound, syntax.Val):
		return Continue(expr.body, env.extend(expr.name, expr.bound.value))
	return _into(expr.bound, env, lambda bound: syntax.Bind(expr.name, bound, expr.body))

def _step_annot(expr:syntax.Annot, env:ENV):
	return Continue(expr.expr, env)

def _step_c(expr:syntax.C, env:ENV):
	return Done(Constructed(expr.constructor))

def _step_case(expr:syntax.Case, env:ENV):
	if not isinstance(expr.scrutinee, syntax.Val):
		return _into(expr.scrutinee, env, lambda scrutinee: syntax.Case(scrutinee, expr.alternatives))
	subject = expr.scrutinee.value
	for pattern, branch in expr.alternatives:
		matched, inner = match(subject, pattern, env)
		if matched: return Continue(branch, inner)
	raise NoMatchingCase(subject)

def _step_val(expr:syntax.Val, env:ENV):
	return Done(expr.value)

def _step_closed(expr:syntax.Closed, env:ENV):
	def plug(outcome):
		if isinstance(outcome, Done): return outcome
		return Continue(_enclose(outcome.expr, outcome.env, env), env)
	return Descend(expr.expr, expr.env, plug)

###############################################################################

STEP_METHODS = {}
for _k, _v in list(globals().items()):
	if _k.startswith("_step_"):
		_t = _v.__annotations__["expr"]
		assert isinstance(_t, type), (_k, _t)
		STEP_METHODS[_t] = _v
