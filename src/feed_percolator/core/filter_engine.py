"""
Filter chain for deciding which items are kept.

Filters run in definition order. Each one may abstain or return a decision;
a decision always overwrites the previous one, so later filters refine or
reverse earlier, broader ones.
"""

import re
from enum import Enum
from typing import Callable, Iterable, Iterator, Optional, Protocol, Sequence, Union

from feed_percolator.exceptions import FilterExecutionError
from feed_percolator.logger import get_logger
from feed_percolator.models import FeedItem, FilterRule

logger = get_logger(__name__)


class FilterAction(Enum):
    """Decision of a filter for one item."""

    ABSTAIN = "abstain"
    INCLUDE = "include"
    EXCLUDE = "exclude"


class Filter(Protocol):
    """Capability deciding on a single item. Must not mutate the item."""

    def apply(self, item: FeedItem) -> FilterAction: ...


FilterLike = Union[Filter, Callable[[FeedItem], FilterAction]]


def _filter_name(filter_: FilterLike) -> str:
    return getattr(filter_, "name", None) or getattr(filter_, "__name__", None) or type(filter_).__name__


def _run_filter(filter_: FilterLike, item: FeedItem) -> FilterAction:
    apply = getattr(filter_, "apply", filter_)
    try:
        action = apply(item)
    except Exception as e:
        raise FilterExecutionError(_filter_name(filter_), item.id, f"{type(e).__name__}: {e}") from e

    if not isinstance(action, FilterAction):
        raise FilterExecutionError(
            _filter_name(filter_), item.id, f"returned {action!r} instead of a FilterAction"
        )
    return action


def apply_filters(filters: Optional[Iterable[FilterLike]], item: FeedItem) -> FilterAction:
    """Fold the filters over an item.

    Starts from INCLUDE; an abstaining filter leaves the running decision
    unchanged, any other result replaces it.

    Args:
        filters: Ordered filters, may be None or empty
        item: Item to decide on

    Returns:
        INCLUDE or EXCLUDE
    """
    result = FilterAction.INCLUDE

    for filter_ in filters or ():
        action = _run_filter(filter_, item)
        if action is not FilterAction.ABSTAIN:
            result = action

    return result


class FilterChain:
    """Ordered list of filters applied to a stream of items."""

    def __init__(self, filters: Optional[Sequence[FilterLike]] = None) -> None:
        """Initialize filter chain.

        Args:
            filters: Filters in evaluation order
        """
        self.filters = list(filters or [])

    def decide(self, item: FeedItem) -> FilterAction:
        """Final decision for an item."""
        return apply_filters(self.filters, item)

    def is_included(self, item: FeedItem) -> bool:
        """Whether the item is kept."""
        return self.decide(item) is FilterAction.INCLUDE

    def filter(self, items: Iterable[FeedItem]) -> Iterator[FeedItem]:
        """Lazily yield the included items, preserving order.

        Args:
            items: Items to filter

        Yields:
            Included items
        """
        for item in items:
            if self.is_included(item):
                yield item
            else:
                logger.trace(f"Excluded by filters: {item!r}")

    def __len__(self) -> int:
        return len(self.filters)


class RuleFilter:
    """Base class for filters built from a FilterRule.

    Returns the rule's action when the item matches and abstains otherwise.
    """

    def __init__(self, name: str, pattern: str, action: FilterAction) -> None:
        self.name = name
        self.pattern = pattern
        self.action = action

    def matches(self, item: FeedItem) -> bool:
        raise NotImplementedError

    def apply(self, item: FeedItem) -> FilterAction:
        if self.matches(item):
            return self.action
        return FilterAction.ABSTAIN

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(name={self.name!r}, pattern={self.pattern!r}, action={self.action.value})>"


class KeywordFilter(RuleFilter):
    """Case-insensitive keyword match on title, summary and content."""

    def matches(self, item: FeedItem) -> bool:
        keyword = self.pattern.lower()
        return any(keyword in text.lower() for text in (item.title, item.summary, item.content) if text)


class RegexFilter(RuleFilter):
    """Case-insensitive regex search on title, summary and content."""

    def __init__(self, name: str, pattern: str, action: FilterAction) -> None:
        super().__init__(name, pattern, action)
        self._regex = re.compile(pattern, re.IGNORECASE)

    def matches(self, item: FeedItem) -> bool:
        return any(self._regex.search(text) for text in (item.title, item.summary, item.content) if text)


class TagFilter(RuleFilter):
    """Substring match against item tags."""

    def matches(self, item: FeedItem) -> bool:
        pattern = self.pattern.lower()
        return any(pattern in tag.lower() for tag in item.tags)


class LanguageFilter(RuleFilter):
    """Exact match on the item language code."""

    def matches(self, item: FeedItem) -> bool:
        if not item.language:
            return False
        return self.pattern.lower() == item.language.lower()


_RULE_FILTERS = {
    "keyword": KeywordFilter,
    "regex": RegexFilter,
    "tag": TagFilter,
    "language": LanguageFilter,
}


def create_filter(rule: FilterRule) -> RuleFilter:
    """Create the filter for one rule.

    Args:
        rule: Rule definition

    Returns:
        RuleFilter for the rule type
    """
    filter_class = _RULE_FILTERS[rule.rule_type]
    return filter_class(rule.name, rule.pattern, FilterAction(rule.action))


def create_filters(rules: Iterable[FilterRule]) -> list[RuleFilter]:
    """Create filters for the enabled rules, keeping their order.

    Args:
        rules: Rule definitions

    Returns:
        List of filters
    """
    filters = [create_filter(rule) for rule in rules if rule.enabled]
    logger.debug(f"Created {len(filters)} rule filters")
    return filters
