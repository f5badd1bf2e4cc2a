"""
Rule configuration.

FieldRule describes one rule on one field. Rules come either from a YAML
file (RuleConfigLoader) or from the canonical field definitions
(default_soldier_rules).
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from army_records.core.schema.fields import (
    SERVICE_DATE_PATTERN,
    SOLDIER_FIELDS,
    STATUS_VALUES,
)

Severity = Literal["error", "warning"]


class FieldRule(BaseModel):
    """
    One configured field rule.

    Attributes:
        rule_name: Unique name of the rule
        rule_type: Validator type (required_field, type_check, max_length,
            regex, date_format, calendar_date, enum)
        field_name: Candidate key the rule checks
        parameters: Validator parameters, including the message label
        severity: "error" rejects the batch, "warning" is only reported
        enabled: Disabled rules are not compiled
    """

    rule_name: str
    rule_type: str
    field_name: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    severity: Severity = "error"
    enabled: bool = True

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "rule_name": "status_enum",
                "rule_type": "enum",
                "field_name": "status",
                "parameters": {"allowed": ["Active", "Retired", "Deceased"], "label": "Status"},
                "severity": "error",
                "enabled": True,
            }
        }


class RuleConfigLoader:
    """
    Loads field rules from a YAML file.

    Rules are listed per field and run top to bottom:
    ```yaml
    rules:
      id:
        - type: required_field
          params: {label: ID}
        - type: max_length
          params: {max_length: 50, label: ID}
      status:
        - type: enum
          name: status_enum
          severity: error
          params: {allowed: [Active, Retired, Deceased]}
    ```

    Raises:
        FileNotFoundError: If the file does not exist
    """

    def __init__(self, config_path: str | Path):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_rules(self) -> list[FieldRule]:
        """
        Parse the file into FieldRule models.

        Raises:
            ValueError: If the YAML is malformed or a rule is invalid
        """
        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config, dict) or "rules" not in config:
            raise ValueError("Configuration file must contain 'rules' section")

        rules = []
        for field_name, rule_defs in (config["rules"] or {}).items():
            if not isinstance(rule_defs, list):
                raise ValueError(f"Rules for field '{field_name}' must be a list")
            rules.extend(
                self._parse_rule(field_name, rule_def, idx)
                for idx, rule_def in enumerate(rule_defs)
            )
        return rules

    @staticmethod
    def _parse_rule(field_name: str, rule_def: Any, idx: int) -> FieldRule:
        if not isinstance(rule_def, dict) or "type" not in rule_def:
            raise ValueError(f"Rule for field '{field_name}' is missing 'type'")

        rule_type = rule_def["type"]
        rule_name = rule_def.get("name", f"{field_name}_{rule_type}_{idx}")

        severity = rule_def.get("severity", "error")
        if severity not in ("error", "warning"):
            raise ValueError(
                f"Invalid severity '{severity}' for rule '{rule_name}'. Must be 'error' or 'warning'"
            )

        return FieldRule(
            rule_name=rule_name,
            rule_type=rule_type,
            field_name=field_name,
            parameters=rule_def.get("params", rule_def.get("parameters")) or {},
            severity=severity,
            enabled=rule_def.get("enabled", True),
        )


class RuleConfigBuilder:
    """
    Builds rule lists in code. Rule names follow "<field>_<suffix>".

    Every add_* method returns the builder, so calls chain:
        RuleConfigBuilder().add_required_field("id", "ID").add_max_length("id", 50, "ID").build()
    """

    def __init__(self):
        self.rules: list[FieldRule] = []

    def _add(
        self,
        field_name: str,
        rule_type: str,
        suffix: str,
        label: str | None,
        **parameters: Any
    ) -> "RuleConfigBuilder":
        self.rules.append(FieldRule(
            rule_name=f"{field_name}_{suffix}",
            rule_type=rule_type,
            field_name=field_name,
            parameters={**parameters, "label": label or field_name},
        ))
        return self

    def add_required_field(self, field_name: str, label: str | None = None) -> "RuleConfigBuilder":
        return self._add(field_name, "required_field", "required", label)

    def add_type_check(
        self,
        field_name: str,
        expected_type: str = "string",
        label: str | None = None
    ) -> "RuleConfigBuilder":
        return self._add(field_name, "type_check", "type_check", label, expected_type=expected_type)

    def add_max_length(self, field_name: str, max_length: int, label: str | None = None) -> "RuleConfigBuilder":
        return self._add(field_name, "max_length", "max_length", label, max_length=max_length)

    def add_regex(self, field_name: str, pattern: str, label: str | None = None) -> "RuleConfigBuilder":
        return self._add(field_name, "regex", "regex", label, pattern=pattern)

    def add_date_format(self, field_name: str, label: str | None = None) -> "RuleConfigBuilder":
        return self._add(field_name, "date_format", "date_format", label, pattern=SERVICE_DATE_PATTERN)

    def add_calendar_date(self, field_name: str, label: str | None = None) -> "RuleConfigBuilder":
        return self._add(field_name, "calendar_date", "calendar_date", label)

    def add_enum(self, field_name: str, allowed: list[str], label: str | None = None) -> "RuleConfigBuilder":
        return self._add(field_name, "enum", "enum", label, allowed=list(allowed))

    def build(self) -> list[FieldRule]:
        return list(self.rules)


def default_soldier_rules() -> list[FieldRule]:
    """
    Build the fixed soldier schema from SOLDIER_FIELDS.

    Per field, rules are ordered presence, then type or format, then
    length, calendar or enum checks.
    """
    builder = RuleConfigBuilder()
    for spec in SOLDIER_FIELDS:
        builder.add_required_field(spec.key, spec.label)
        if spec.kind == "string":
            builder.add_type_check(spec.key, "string", spec.label)
            if spec.max_length:
                builder.add_max_length(spec.key, spec.max_length, spec.label)
        elif spec.kind == "date":
            builder.add_date_format(spec.key, spec.label)
            builder.add_calendar_date(spec.key, spec.label)
        elif spec.kind == "enum":
            builder.add_enum(spec.key, list(STATUS_VALUES), spec.label)
    return builder.build()
