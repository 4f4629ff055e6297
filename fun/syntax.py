"""
The expression tree the evaluator consumes.
A parser (or a test) builds these bottom-up; nothing downstream ever mutates one.
Reduction makes new nodes instead, which is why a couple of node types at the end
exist only as intermediate states of evaluation.
"""
from typing import Any, Sequence

PLUS, MINUS, TIMES = "+", "-", "*"
GT, GE, LT, LE = ">", ">=", "<", "<="

ARITHMETIC = frozenset([PLUS, MINUS, TIMES])
COMPARISON = frozenset([GT, GE, LT, LE])

###############################################################################
#  Annotation types: carried around, never inspected by the evaluator.

class Type:
	pass

class _Atomic(Type):
	def __init__(self, name:str): self.name = name
	def __str__(self): return self.name
	def __repr__(self): return "<%s>"%self.name

IntTy = _Atomic("int")
BoolTy = _Atomic("bool")

class FunTy(Type):
	def __init__(self, arg:Type, result:Type):
		self.arg, self.result = arg, result
	def __str__(self): return "(%s -> %s)" % (self.arg, self.result)

class DataTy(Type):
	def __init__(self, name:str): self.name = name
	def __str__(self): return self.name

class DataConstructor:
	"""
	A named tag with a declared field signature.
	Two of these are the same constructor exactly when their names agree.
	"""
	def __init__(self, name:str, field_types:Sequence[Type]=()):
		assert isinstance(name, str)
		self.name = name
		self.field_types = tuple(field_types)

	@property
	def arity(self) -> int: return len(self.field_types)

	def __eq__(self, other):
		return isinstance(other, DataConstructor) and self.name == other.name
	def __hash__(self): return hash(self.name)
	def __str__(self): return self.name
	def __repr__(self): return "<DC %s/%d>" % (self.name, self.arity)

###############################################################################
#  Patterns

class Pattern:
	pass

class IntP(Pattern):
	def __init__(self, value:int): self.value = value
	def __str__(self): return str(self.value)

class BoolP(Pattern):
	def __init__(self, value:bool): self.value = value
	def __str__(self): return str(self.value)

class VarP(Pattern):
	def __init__(self, name:str): self.name = name
	def __str__(self): return self.name

class P(Pattern):
	def __init__(self, constructor:DataConstructor, sub_patterns:Sequence[Pattern]=()):
		self.constructor = constructor
		self.sub_patterns = tuple(sub_patterns)
	def __str__(self):
		if not self.sub_patterns: return self.constructor.name
		return "(%s %s)" % (self.constructor.name, ' '.join(map(str, self.sub_patterns)))

###############################################################################
#  Expressions

class Expression:
	pass

class Var(Expression):
	def __init__(self, name:str):
		assert isinstance(name, str), name
		self.name = name
	def __str__(self): return self.name

class IntExp(Expression):
	def __init__(self, value:int): self.value = value
	def __str__(self): return str(self.value)

class BoolExp(Expression):
	def __init__(self, value:bool): self.value = value
	def __str__(self): return str(self.value)

class Op(Expression):
	def __init__(self, op:str, lhs:Expression, rhs:Expression):
		assert op in ARITHMETIC or op in COMPARISON, op
		self.op, self.lhs, self.rhs = op, lhs, rhs
	def __str__(self): return "(%s %s %s)" % (self.lhs, self.op, self.rhs)

class If(Expression):
	def __init__(self, condition:Expression, then_part:Expression, else_part:Expression):
		self.condition, self.then_part, self.else_part = condition, then_part, else_part
	def __str__(self): return "(if %s then %s else %s)" % (self.condition, self.then_part, self.else_part)

class Fun(Expression):
	def __init__(self, param:str, body:Expression):
		self.param, self.body = param, body
	def __str__(self): return "(%s -> %s)" % (self.param, self.body)

class App(Expression):
	def __init__(self, callee:Expression, args:Sequence[Expression]):
		self.callee = callee
		self.args = tuple(args)
	def __str__(self):
		return "(%s)" % ' '.join(map(str, (self.callee,)+self.args))

class Let(Expression):
	def __init__(self, name:str, bound:Expression, body:Expression):
		self.name, self.bound, self.body = name, bound, body
	def __str__(self): return "(let %s = %s in %s)" % (self.name, self.bound, self.body)

class Annot(Expression):
	def __init__(self, expr:Expression, type_expr:Type):
		self.expr, self.type_expr = expr, type_expr
	def __str__(self): return "(%s : %s)" % (self.expr, self.type_expr)

class C(Expression):
	def __init__(self, constructor:DataConstructor):
		assert isinstance(constructor, DataConstructor), constructor
		self.constructor = constructor
	def __str__(self): return self.constructor.name

class Case(Expression):
	def __init__(self, scrutinee:Expression, alternatives:Sequence[tuple[Pattern, Expression]]):
		self.scrutinee = scrutinee
		self.alternatives = tuple(alternatives)
	def __str__(self):
		arms = "; ".join("%s -> %s" % (p, e) for p, e in self.alternatives)
		return "(case %s of [%s])" % (self.scrutinee, arms)

###############################################################################
#  Reduction-only nodes. No parser produces these.

class Val(Expression):
	""" A finished operand, parked in its parent until the parent is ready for it. """
	def __init__(self, value:Any): self.value = value
	def __str__(self): return str(self.value)

class Closed(Expression):
	"""
	A sub-expression that must be reduced under its own environment,
	such as a closure body in the middle of a call with more arguments pending.
	"""
	def __init__(self, expr:Expression, env):
		self.expr, self.env = expr, env
	def __str__(self): return "{%s}" % self.expr

class Bind(Expression):
	"""
	A let whose bound expression was not a function literal when first seen.
	It binds once the bound expression has a value, and never recursively.
	"""
	def __init__(self, name:str, bound:Expression, body:Expression):
		self.name, self.bound, self.body = name, bound, body
	def __str__(self): return "(let %s = %s in %s)" % (self.name, self.bound, self.body)

def strip_annotations(expr:Expression) -> Expression:
	while isinstance(expr, Annot): expr = expr.expr
	return expr
