"""
Pattern matching: does this value fit this pattern, and if so, what gets bound?

A match never fails noisily. A mismatch of any shape just answers False
and hands back the environment it was given.
"""
from boozetools.support.foundation import Visitor
from . import syntax
from .environment import Environment
from .values import FunValue, IntVal, BoolVal, Constructed

MATCH_RESULT = tuple[bool, Environment]

class Matcher(Visitor):

	def visit_IntP(self, pattern:syntax.IntP, value:FunValue, env:Environment) -> MATCH_RESULT:
		return isinstance(value, IntVal) and value.value == pattern.value, env

	def visit_BoolP(self, pattern:syntax.BoolP, value:FunValue, env:Environment) -> MATCH_RESULT:
		return isinstance(value, BoolVal) and value.value == pattern.value, env

	def visit_VarP(self, pattern:syntax.VarP, value:FunValue, env:Environment) -> MATCH_RESULT:
		return True, env.extend(pattern.name, value)

	def visit_P(self, pattern:syntax.P, value:FunValue, env:Environment) -> MATCH_RESULT:
		if not (
			isinstance(value, Constructed)
			and value.constructor.name == pattern.constructor.name
			and len(value.fields) == len(pattern.sub_patterns)
		):
			return False, env
		# Left to right, each sub-match extending what the previous one built.
		inner = env
		for field, sub_pattern in zip(value.fields, pattern.sub_patterns):
			ok, inner = self.visit(sub_pattern, field, inner)
			if not ok: return False, env
		return True, inner

_matcher = Matcher()

def match(value:FunValue, pattern:syntax.Pattern, env:Environment) -> MATCH_RESULT:
	return _matcher.visit(pattern, value, env)
