"""
Lint rule lookup by name.

Built-in rules are declared under the ``agentdocs.lint_rules`` entry point
group in this package's pyproject.toml. A corpus can ship extra checks from
its own package the same way:

    [project.entry-points."agentdocs.lint_rules"]
    stale-persona = "corpus_checks.rules:StalePersonaRule"
"""

import warnings
from importlib.metadata import entry_points
from typing import Any

from agentdocs.domain.interfaces import LintRuleInterface

ENTRY_POINT_GROUP = "agentdocs.lint_rules"


class RuleRegistry:
    """
    Name -> LintRuleInterface class, shared by the whole process.

    Entry points are read the first time a rule is looked up. Rules
    registered by hand keep their name even when an entry point uses it
    too, so ``agentdocs lint`` can pin the built-ins.
    """

    _rules: dict[str, type[LintRuleInterface]] = {}
    _loaded: bool = False

    @classmethod
    def _load_entry_points(cls) -> None:
        if cls._loaded:
            return

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                cls._rules.setdefault(ep.name, ep.load())
            except (ImportError, AttributeError) as e:
                warnings.warn(f"Skipping lint rule '{ep.name}': {e}", stacklevel=2)

        cls._loaded = True

    @classmethod
    def register(cls, name: str, rule_class: type[LintRuleInterface]) -> None:
        """Register ``rule_class`` under ``name``, replacing any earlier entry."""
        cls._rules[name] = rule_class

    @classmethod
    def get(cls, name: str) -> type[LintRuleInterface]:
        """
        The rule class registered as ``name``.

        Raises:
            KeyError: Naming the rules that are available
        """
        cls._load_entry_points()
        if name not in cls._rules:
            available = ", ".join(sorted(cls._rules)) or "(none)"
            raise KeyError(f"Lint rule '{name}' not found. Available rules: {available}")
        return cls._rules[name]

    @classmethod
    def create(cls, name: str, **options: Any) -> LintRuleInterface:
        """Instantiate the rule ``name`` with keyword ``options``."""
        return cls.get(name)(**options)

    @classmethod
    def available(cls) -> list[str]:
        """Sorted names of every known rule."""
        cls._load_entry_points()
        return sorted(cls._rules)

    @classmethod
    def clear(cls) -> None:
        """Forget every rule and read the entry points again on next lookup."""
        cls._rules.clear()
        cls._loaded = False
