"""
Simplest possible environment concept.

This is the canonical list-structured search: each binding is a link
pointing at the environment it extends. Extending never touches the
old chain, so whoever captured it keeps seeing exactly what was there.
"""
from typing import Any, Mapping
import abc

class Environment(abc.ABC):
	@abc.abstractmethod
	def resolve(self, name:str) -> Any:
		pass

	@abc.abstractmethod
	def _visit(self, seen:dict):
		pass

	def extend(self, name:str, value:Any) -> "Environment":
		return InnerEnv(name, value, self)

	def __contains__(self, name:str) -> bool:
		try: self.resolve(name)
		except KeyError: return False
		else: return True

	def as_dict(self) -> dict[str, Any]:
		""" The bindings visible from here, innermost first. """
		seen = {}
		self._visit(seen)
		return seen

	@staticmethod
	def of(bindings:Mapping[str, Any]) -> "Environment":
		env = EMPTY
		for name, value in bindings.items():
			env = env.extend(name, value)
		return env

class NullEnv(Environment):
	""" Effectively the built-in scope, but with nothing built in. """
	def resolve(self, name:str) -> Any:
		raise KeyError(name)
	def _visit(self, seen:dict):
		pass
	def __repr__(self): return "{}"

EMPTY = NullEnv()

class InnerEnv(Environment):
	def __init__(self, name:str, value:Any, static_link:Environment):
		assert isinstance(static_link, Environment), static_link
		self._name = name
		self._value = value
		self._static_link = static_link

	def resolve(self, name:str) -> Any:
		env = self
		while isinstance(env, InnerEnv):
			if env._name == name: return env._value
			env = env._static_link
		return env.resolve(name)

	def _visit(self, seen:dict):
		env = self
		while isinstance(env, InnerEnv):
			if env._name not in seen: seen[env._name] = env._value
			env = env._static_link

	def __repr__(self):
		return "{%s}" % ", ".join("%s: %s" % pair for pair in self.as_dict().items())
