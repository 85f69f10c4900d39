"""Matching machinery shared by every category parser.

Each parser owns a RuleTableMatcher configured with its own rule table. The
matcher walks the table in order and stops at the first rule whose regex
matches; table order is the only notion of priority.
"""
import os
import re
import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from core.cache import CacheInterface, get_cache
from core.version_utils import normalize_version
from models.rule import CompiledRule, Rule, RuleTable
from rules.rules_loader import RuleTableError, load_rule_table

logger = logging.getLogger(__name__)

# A rule must not match in the middle of a word: 'Xbox' must not hit 'MyXbox'
MATCH_PREFIX = r'(?:^|[^A-Z_-])'
TEMPLATE_GROUP_PATTERN = re.compile(r'\$(\d)')


def compile_pattern(regex: str) -> re.Pattern:
    """Compile a rule regex the way every parser evaluates it."""
    try:
        return re.compile(f'{MATCH_PREFIX}(?:{regex})', re.IGNORECASE)
    except re.error as e:
        raise RuleTableError(f"Invalid regex {regex!r}: {e}") from e


def compile_rule(rule: Rule) -> CompiledRule:
    return CompiledRule(
        rule=rule,
        pattern=compile_pattern(rule.regex),
        models=tuple(compile_rule(m) for m in rule.models),
    )


def compile_rule_table(table: Iterable[Rule]) -> Tuple[CompiledRule, ...]:
    return tuple(compile_rule(rule) for rule in table)


def match_user_agent(regex: str, user_agent: str) -> Optional[re.Match]:
    """One-off token test using the same boundary rules as the parsers."""
    return compile_pattern(regex).search(user_agent or '')


def build_by_match(template: Optional[str], match: Optional[re.Match]) -> str:
    """Substitute $1..$9 in template with the captured groups of match."""
    if not template:
        return ''

    def _group(m: re.Match) -> str:
        index = int(m.group(1))
        if match is None or index == 0 or index > match.re.groups:
            return ''
        return match.group(index) or ''

    return TEMPLATE_GROUP_PATTERN.sub(_group, template).strip()


def build_version(template: Optional[str], match: Optional[re.Match]) -> str:
    return normalize_version(build_by_match(template, match))


def build_model(template: Optional[str], match: Optional[re.Match]) -> str:
    model = build_by_match(template, match).replace('_', ' ')
    model = re.sub(r' TD$', '', model, flags=re.IGNORECASE).strip()
    # 'Build' is what '$1' captures from "...; Build/XYZ" when no model is sent
    if model == 'Build':
        return ''
    return model


@dataclass(frozen=True)
class RuleMatch:
    """The first matching rule of a table, refined by its first matching sub-rule."""
    rule: Rule
    match: re.Match
    model_rule: Optional[Rule] = None
    model_match: Optional[re.Match] = None

    @property
    def name(self) -> str:
        return build_by_match(self.rule.name, self.match)

    @property
    def version(self) -> str:
        version = build_version(self.rule.version, self.match)
        if self.model_rule is not None and self.model_rule.version is not None:
            return build_version(self.model_rule.version, self.model_match) or version
        return version

    @property
    def model(self) -> str:
        if self.model_rule is not None and self.model_rule.model is not None:
            return build_model(self.model_rule.model, self.model_match)
        return build_model(self.rule.model, self.match)

    @property
    def device(self) -> Optional[str]:
        if self.model_rule is not None and self.model_rule.device:
            return self.model_rule.device
        return self.rule.device

    @property
    def metadata(self) -> dict:
        return self.rule.metadata


class RuleTableMatcher:
    """Evaluates one rule table against user agents, caching the compiled table."""

    def __init__(
        self,
        fixture: str,
        rules: Optional[RuleTable] = None,
        cache: Optional[CacheInterface] = None,
        rules_dir: Optional[str] = None,
        table_id: Optional[str] = None,
    ):
        """
        Args:
            fixture: Bundled table to load, relative to rules_dir (e.g. 'oss.yml')
            rules: Inline rule table used instead of the fixture
            cache: Pattern cache (default: process-wide MemoryCache)
            rules_dir: Directory holding the fixture (default: bundled rules)
            table_id: Cache identity of the table (derived when omitted)
        """
        self.fixture = fixture
        self.rules_dir = rules_dir
        self._rules = tuple(rules) if rules is not None else None
        self.cache = cache if cache is not None else get_cache()
        self.table_id = table_id or self._derive_table_id()

    def _derive_table_id(self) -> str:
        if self._rules is not None:
            digest = hashlib.sha1(repr(self._rules).encode("utf-8")).hexdigest()
            return f"{self.fixture}@{digest}"
        if self.rules_dir:
            return os.path.join(os.path.abspath(self.rules_dir), self.fixture)
        return self.fixture

    def regexes(self) -> Tuple[CompiledRule, ...]:
        """Return the compiled table, compiling it on a cache miss."""
        key = f"regexes-{self.table_id}"
        compiled = self._cache_get(key)
        if compiled is None:
            table = self._rules if self._rules is not None else load_rule_table(self.fixture, self.rules_dir)
            compiled = compile_rule_table(table)
            logger.debug(f"Compiled {len(compiled)} rules for {self.table_id}")
            self._cache_set(key, compiled)
        return compiled

    def overall_pattern(self) -> Optional[re.Pattern]:
        """One alternation of every regex in the table, used as a pre-check."""
        key = f"regexes-{self.table_id}-overall"
        pattern = self._cache_get(key)
        if pattern is None:
            regexes = [f'(?:{c.rule.regex})' for c in reversed(self.regexes())]
            if not regexes:
                return None
            pattern = compile_pattern('|'.join(regexes))
            self._cache_set(key, pattern)
        return pattern

    def pre_match_overall(self, user_agent: str) -> bool:
        """Cheap test whether any rule of the table could match."""
        pattern = self.overall_pattern()
        return pattern is not None and pattern.search(user_agent or '') is not None

    def first_match(self, user_agent: str) -> Optional[Tuple[CompiledRule, re.Match]]:
        return _first_match(self.regexes(), user_agent or '')

    def match(self, user_agent: str) -> Optional[RuleMatch]:
        """
        Find the first matching rule and refine it with its nested model rules.

        Returns:
            RuleMatch or None when no rule of the table matches
        """
        found = self.first_match(user_agent)
        if found is None:
            return None

        compiled, match = found
        logger.debug(f"{self.table_id}: matched {compiled.rule.regex!r}")
        sub = self.match_submodels(compiled, user_agent)
        if sub is None:
            return RuleMatch(rule=compiled.rule, match=match)
        return RuleMatch(rule=compiled.rule, match=match, model_rule=sub[0].rule, model_match=sub[1])

    def match_submodels(self, compiled: CompiledRule, user_agent: str) -> Optional[Tuple[CompiledRule, re.Match]]:
        """First matching nested model rule of compiled, in table order."""
        if not compiled.models:
            return None
        return _first_match(compiled.models, user_agent or '')

    def _cache_get(self, key: str) -> Optional[Any]:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.warning(f"Pattern cache get failed for {key}, recompiling: {e}")
            return None

    def _cache_set(self, key: str, value: Any) -> None:
        try:
            self.cache.set(key, value)
        except Exception as e:
            logger.warning(f"Pattern cache set failed for {key}: {e}")


def _first_match(compiled_rules: Iterable[CompiledRule], user_agent: str) -> Optional[Tuple[CompiledRule, re.Match]]:
    for compiled in compiled_rules:
        match = compiled.pattern.search(user_agent)
        if match:
            return compiled, match
    return None
