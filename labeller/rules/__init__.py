"""Rule evaluation: fact records, rule scripts and label host functions."""

from .addresses import Address, parse_address, parse_address_list, split_address_list
from .bridge import LabelMutation, LabelRequests, RuleBridge
from .facts import FactRecord, FactRecordBuilder
from .script import RuleScript, get_script_path, parse_rules

__all__ = [
    "Address",
    "FactRecord",
    "FactRecordBuilder",
    "LabelMutation",
    "LabelRequests",
    "RuleBridge",
    "RuleScript",
    "get_script_path",
    "parse_address",
    "parse_address_list",
    "parse_rules",
    "split_address_list",
]
