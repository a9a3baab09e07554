"""
Lint rules for agentdocs corpora.

Rules are deterministic checks over a CorpusIndex snapshot that yield
LintFindings. Built-in rules are registered under the ``agentdocs.lint_rules``
entry point group; other packages can add their own.

Organization by concern:
- links: relative links and anchors resolve
- agents: cross-agent mentions resolve to agent documents
- structure: per-document heading conventions
- sync: JSON mirrors match their markdown
"""

from agentdocs.domain.interfaces import LintRuleInterface
from agentdocs.rules.agents import UnknownAgentRule
from agentdocs.rules.links import BrokenLinkRule
from agentdocs.rules.structure import DuplicateHeadingRule, MissingOverviewRule
from agentdocs.rules.sync import OrphanJsonRule, StaleJsonRule

BUILTIN_RULES: tuple[type[LintRuleInterface], ...] = (
    BrokenLinkRule,
    UnknownAgentRule,
    MissingOverviewRule,
    DuplicateHeadingRule,
    StaleJsonRule,
    OrphanJsonRule,
)


def default_rules() -> list[LintRuleInterface]:
    return [rule() for rule in BUILTIN_RULES]


__all__ = [
    # Reference rules (errors)
    "BrokenLinkRule",
    "UnknownAgentRule",
    # Structure rules (warnings)
    "MissingOverviewRule",
    "DuplicateHeadingRule",
    # Mirror rules (warnings)
    "StaleJsonRule",
    "OrphanJsonRule",
    "BUILTIN_RULES",
    "default_rules",
]
