"""Sanitizer — applies PatternPolicy rule sets to strings.

Three pure transforms, one per concern:
  - is_dangerous(code)   block/allow verdict for console code (first match wins)
  - redact_secrets(text) scrub credentials from text before the AI sees it
  - redact_pii(text)     scrub personal data from commands for audit export

Secrets and PII are separate surfaces: secrets are stripped from AI-facing
output, PII from the exported audit trail. Neither transform touches the
other's rules.
"""

from __future__ import annotations

import logging
from collections.abc import Collection

from guard.models.policy import CommandVerdict, RuleCategory
from guard.policy.rules import ENV_READ_ADVISORY, PatternPolicy

logger = logging.getLogger(__name__)


class Sanitizer:
    def __init__(self, policy: PatternPolicy | None = None) -> None:
        self._policy = policy or PatternPolicy()

    @property
    def policy(self) -> PatternPolicy:
        return self._policy

    def is_dangerous(
        self,
        code: str,
        rule_ids: Collection[str] | None = None,
    ) -> tuple[bool, str | None]:
        """Return (True, rule_id) for the first matching dangerous-operation rule.

        rule_ids restricts evaluation to a subset of rules (order is kept).
        """
        for rule in self._policy.rules(RuleCategory.DANGEROUS_OP):
            if rule_ids is not None and rule.id not in rule_ids:
                continue
            if rule.search(code):
                return True, rule.id
        return False, None

    def check_command(self, code: str) -> CommandVerdict:
        dangerous, rule_id = self.is_dangerous(code)
        return CommandVerdict(dangerous=dangerous, rule_id=rule_id)

    def redact_secrets(self, text: str) -> str:
        """Replace credential-shaped substrings with placeholders.

        An environment-variable read anywhere in the text replaces the WHOLE
        text with ENV_READ_ADVISORY. Idempotent.
        """
        if not isinstance(text, str) or not text:
            return text

        if self.reads_environment(text):
            return ENV_READ_ADVISORY
        for rule in self._policy.rules(RuleCategory.SECRET):
            text = rule.sub(text)
        return text

    def reads_environment(self, text: str) -> bool:
        """True if any blocking secret rule (an environment-variable read) matches."""
        for rule in self._policy.rules(RuleCategory.SECRET):
            if rule.blocks and rule.search(text):
                logger.warning("Environment read detected (rule=%s); text withheld", rule.id)
                return True
        return False

    def redact_pii(self, text: str) -> str:
        """Replace personal data with placeholder tokens ([EMAIL], [PHONE], ...)."""
        if not isinstance(text, str) or not text:
            return text
        for rule in self._policy.rules(RuleCategory.PII):
            text = rule.sub(text)
        return text
