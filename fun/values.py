"""
This module defines the value-types that the evaluator operates in terms of.
Python's own int and bool would muddle together (True == 1), so every kind of
value wears its own tag.
"""
from abc import ABC
from typing import Sequence
from . import syntax
from .environment import Environment

class FunValue(ABC):
	""" Root for the run-time values of the language """

class IntVal(FunValue):
	def __init__(self, value:int):
		assert type(value) is int, value
		self.value = value
	def __eq__(self, other): return type(other) is IntVal and self.value == other.value
	def __hash__(self): return hash((IntVal, self.value))
	def __str__(self): return str(self.value)
	def __repr__(self): return "IntVal(%d)" % self.value

class BoolVal(FunValue):
	def __init__(self, value:bool):
		assert type(value) is bool, value
		self.value = value
	def __eq__(self, other): return type(other) is BoolVal and self.value == other.value
	def __hash__(self): return hash((BoolVal, self.value))
	def __str__(self): return str(self.value)
	def __repr__(self): return "BoolVal(%s)" % self.value

class Closure(FunValue):
	"""
	A function value tied to its natal environment.
	There is no sensible way to compare two functions, so each is equal only to itself.
	"""
	def __init__(self, param:str, body:syntax.Expression, env:Environment):
		self.param = param
		self.body = body
		self.env = env
	def __eq__(self, other): return self is other
	def __hash__(self): return id(self)
	def __str__(self): return "<function>"
	def __repr__(self): return "<Closure %s -> %s>" % (self.param, self.body)

	@classmethod
	def recursive(cls, name:str, fun:syntax.Fun, env:Environment) -> "Closure":
		"""
		Build a closure whose own environment already maps `name` to itself.
		The knot is tied here, once, before anyone else can see the closure.
		"""
		closure = cls(fun.param, fun.body, env)
		closure.env = env.extend(name, closure)
		return closure

class Constructed(FunValue):
	""" A data constructor applied to however many fields it has so far. """
	def __init__(self, constructor:syntax.DataConstructor, fields:Sequence[FunValue]=()):
		self.constructor = constructor
		self.fields = tuple(fields)

	def is_partial(self) -> bool: return len(self.fields) < self.constructor.arity

	def append(self, field:FunValue) -> "Constructed":
		return Constructed(self.constructor, self.fields + (field,))

	def __eq__(self, other):
		return (
			type(other) is Constructed
			and self.constructor.name == other.constructor.name
			and self.fields == other.fields
		)
	def __hash__(self): return hash((self.constructor.name, self.fields))

	def __str__(self): return _display(self)
	def __repr__(self): return "Constructed(%s, %r)" % (self.constructor.name, list(self.fields))

def _display(value:FunValue) -> str:
	""" Nested fields go in parentheses. Long lists nest deeply, so this keeps its own stack. """
	parts, work = [], [value]
	while work:
		item = work.pop()
		if isinstance(item, str):
			parts.append(item)
		elif isinstance(item, Constructed) and item.fields:
			todo = [item.constructor.name]
			for field in item.fields:
				todo.append(" ")
				if isinstance(field, Constructed) and field.fields: todo.extend(["(", field, ")"])
				else: todo.append(field)
			work.extend(reversed(todo))
		elif isinstance(item, Constructed):
			parts.append(item.constructor.name)
		else:
			parts.append(str(item))
	return ''.join(parts)
