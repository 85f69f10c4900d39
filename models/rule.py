import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Rule:
    """Defines one entry of a rule table."""
    regex: str
    name: Optional[str] = None # Template for the primary name, e.g. 'Chrome' or '$1'
    version: Optional[str] = None # Template for the version, e.g. '$1'
    brand: Optional[str] = None # Device tables only
    device: Optional[str] = None # Device type label, e.g. 'smartphone'
    model: Optional[str] = None
    engine: Optional[Dict[str, Any]] = None # Browser tables only: {'default': ..., 'versions': {...}}
    metadata: Dict[str, Any] = field(default_factory=dict) # category, url, producer...
    models: Tuple["Rule", ...] = ()


RuleTable = Tuple[Rule, ...]


@dataclass(frozen=True)
class CompiledRule:
    """A rule together with its ready-to-evaluate pattern."""
    rule: Rule
    pattern: re.Pattern
    models: Tuple["CompiledRule", ...] = ()
