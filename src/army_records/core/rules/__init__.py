"""
Validation rule engine, configuration management and batch schema validation.
"""

from .rule_config import FieldRule, RuleConfigBuilder, RuleConfigLoader, default_soldier_rules
from .rule_engine import RuleEngine
from .schema_validator import SchemaValidator

__all__ = [
    "FieldRule",
    "RuleEngine",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "SchemaValidator",
    "default_soldier_rules",
]
