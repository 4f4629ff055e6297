"""
Everything that can go wrong while evaluating, and the means to say so.

The reducer raises these; the driver hands the first one back to its caller
unchanged. A Report collects them for people to read.
"""
import sys, random
from typing import Any, Sequence

class TooManyIssues(Exception):
	pass

class EvaluationError(Exception):
	"""
	Root of the failure taxonomy.
	`reason` names the kind of failure; `culprit` is whatever construct is to blame.
	"""
	reason = "EvaluationError"
	culprit: Any

	def __init__(self, message:str, culprit:Any=None):
		super().__init__(message)
		self.culprit = culprit

	def describe(self) -> str:
		return "%s: %s" % (self.reason, self.args[0])

class UnboundVariable(EvaluationError):
	reason = "UnboundVariable"
	def __init__(self, name:str):
		super().__init__("Unbound variable %s" % name, name)

class InvalidOperator(EvaluationError):
	reason = "InvalidOperator"
	def __init__(self, op:str, lhs, rhs):
		message = "Invalid argument to binary operator: %s %s %s" % (lhs, op, rhs)
		super().__init__(message, (op, lhs, rhs))

class NotApplicable(EvaluationError):
	reason = "NotApplicable"
	def __init__(self, callee):
		super().__init__("app requires a function/data constructor, not %s" % callee, callee)

class NoMatchingCase(EvaluationError):
	reason = "NoMatchingCase"
	def __init__(self, scrutinee):
		super().__init__("no matching cases for %s" % scrutinee, scrutinee)

class InvalidLiteral(EvaluationError):
	""" A hand-built tree with the wrong kind of payload in a literal, such as IntExp(True). """
	reason = "InvalidLiteral"
	def __init__(self, kind:str, payload):
		super().__init__("%s literal cannot hold %r" % (kind, payload), payload)

class OutOfFuel(EvaluationError):
	""" Not part of the language: a caller asked for evaluation to stop after so many steps. """
	reason = "OutOfFuel"
	def __init__(self, limit:int):
		super().__init__("gave up after %d steps" % limit, limit)

def _outburst():
	particle = ["Oh, ", "Well, ", "Aw, ", "", ""]

	minced_oaths = [
		'Ack', 'Blargh', 'Confound it', 'Crud', 'Curses', 'Drat',
		'Fiddlesticks', 'Good Grief', 'Great Scott', 'Heavens', 'Nuts', 'Rats',
	]

	resignations = [
		'I am undone.',
		'I cannot continue.',
		'I have no idea what the right answer is.',
		'I need to ask for help.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Pic:
	""" One issue, ready to be shown to a person. """
	def __init__(self, intro:str, details:Sequence[str]=(), footer:Sequence[str]=()):
		self._intro, self._details, self._footer = intro, list(details), footer
	def as_text(self):
		lines = [self._intro, ""]
		lines.extend("    " + d for d in self._details)
		lines.extend(self._footer)
		return '\n'.join(lines)

class Report:
	""" Collects issues, and narrates evaluation on request. """
	_issues : list[Pic]

	def __init__(self, *, verbose:int=0, max_issues=3):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	def issue(self, it:Pic):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def reset(self):
		self._issues.clear()

	def narrating(self) -> bool: return bool(self._verbose)

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)

	# Methods the driver calls:

	def failed(self, expr, error:EvaluationError):
		intro = "Evaluation went wrong: %s." % error.reason
		details = ["while evaluating: %s" % expr, error.describe()]
		self.issue(Pic(intro, details))

	def ran_out_of_fuel(self, expr, error:OutOfFuel):
		intro = "Evaluation did not finish within %d steps." % error.culprit
		footer = ["Perhaps the program diverges, or perhaps it needs more fuel."]
		self.issue(Pic(intro, ["while evaluating: %s" % expr], footer))

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
