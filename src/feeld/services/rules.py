"""RuleService: rule-spec translation and the constraint catalog."""

from __future__ import annotations

from feeld.domain.errors import FeeldError
from feeld.domain.rules import constraint_catalog, translate_rules
from feeld.domain.types import Dialect
from feeld.services.base import BaseService
from feeld.services.result import ServiceResult, failure


class RuleService(BaseService):
    """Read-only operations over the rule dialects."""

    def translate(self, spec: str) -> ServiceResult:
        """Parse *spec* (either dialect) and render it in both."""
        op = "translate_rules"
        try:
            rule_set = translate_rules(spec)
        except FeeldError as exc:
            return failure(op, exc, spec=spec)

        constraints = [
            {
                "kind": str(entry.kind),
                "parameter": entry.parameter,
                "server": entry.render(Dialect.SERVER),
                "client": entry.render(Dialect.CLIENT),
            }
            for entry in rule_set
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "spec": spec,
                "constraints": constraints,
                "server_rules": rule_set.server_rules,
                "client_rules": rule_set.client_rules,
            },
        )

    def catalog(self) -> ServiceResult:
        """List every supported constraint with its name in each dialect."""
        items = [
            {
                "kind": str(spec.kind),
                "server": spec.server_name,
                "client": spec.client_name,
                "parameter": str(spec.parameter),
                "registry_enforced": spec.registry_enforced,
            }
            for spec in constraint_catalog()
        ]
        return ServiceResult(ok=True, op="rule_catalog", data={"items": items, "count": len(items)})
