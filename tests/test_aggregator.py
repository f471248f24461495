import logging

from inkcomplete.completion.aggregator import (
    ProviderChain,
    SuggestionAggregator,
    dedupe_by_display_name,
)
from inkcomplete.completion.suggestion import EditorPosition, QueryContext, Suggestion
from inkcomplete.providers.base import DictionaryProvider
from inkcomplete.services.reject_list import RejectList
from inkcomplete.services.word_index import WordIndex


class FakeProvider:
    def __init__(self, names, *, blocks=False, override_start=None):
        self.blocks_all_other_providers = blocks
        self.calls = 0
        self._suggestions = [Suggestion(n, n, override_start=override_start) for n in names]

    def get_suggestions(self, context, settings):
        self.calls += 1
        return list(self._suggestions)


class ExplodingProvider:
    blocks_all_other_providers = False

    def get_suggestions(self, context, settings):
        raise RuntimeError("index went away")


def _context(query="wor", start_ch=3, end_ch=6):
    return QueryContext(query, " ", EditorPosition(0, start_ch), EditorPosition(0, end_ch))


def _names(result):
    return [s.display_name for s in result.suggestions]


def test_dedupe_keeps_first_occurrence():
    items = [Suggestion("a", "1"), Suggestion("b", "2"), Suggestion("a", "3")]
    out = dedupe_by_display_name(items)
    assert [(s.display_name, s.replacement) for s in out] == [("a", "1"), ("b", "2")]


def test_dedupe_is_idempotent():
    items = [Suggestion.from_string(n) for n in ["x", "y", "x", "z", "y", "x"]]
    once = dedupe_by_display_name(items)
    assert dedupe_by_display_name(once) == once


def test_earlier_provider_wins_duplicates(config):
    first = FakeProvider(["world"])
    second = FakeProvider(["world", "wore"])
    aggregator = SuggestionAggregator(ProviderChain([first, second]), RejectList())
    result = aggregator.aggregate(_context(), config)
    assert _names(result) == ["world", "wore"]


def test_rejected_names_never_appear_in_any_order(config):
    reject = RejectList(["work"])
    providers = [FakeProvider(["work", "world"]), FakeProvider(["wore", "work"])]
    for order in (providers, list(reversed(providers))):
        result = SuggestionAggregator(ProviderChain(order), reject).aggregate(_context(), config)
        assert "work" not in _names(result)


def test_empty_result_is_none(config):
    aggregator = SuggestionAggregator(ProviderChain([FakeProvider([])]), RejectList())
    assert aggregator.aggregate(_context(), config) is None


def test_all_rejected_is_none(config):
    aggregator = SuggestionAggregator(ProviderChain([FakeProvider(["work"])]), RejectList(["work"]))
    assert aggregator.aggregate(_context(), config) is None


def test_blocking_provider_suppresses_later_providers(config):
    anchor = EditorPosition(0, 2)
    blocker = FakeProvider(["note", "info"], blocks=True, override_start=anchor)
    later = FakeProvider(["world"])
    result = SuggestionAggregator(ProviderChain([blocker, later]), RejectList()).aggregate(_context(), config)

    assert _names(result) == ["note", "info"]
    assert later.calls == 0
    assert result.anchor_start == anchor


def test_blocking_provider_without_results_does_not_block(config):
    blocker = FakeProvider([], blocks=True)
    later = FakeProvider(["world"])
    result = SuggestionAggregator(ProviderChain([blocker, later]), RejectList()).aggregate(_context(), config)
    assert _names(result) == ["world"]
    assert result.anchor_start == EditorPosition(0, 3)


def test_mixed_overrides_first_override_wins(config):
    class Mixed:
        blocks_all_other_providers = True

        def get_suggestions(self, context, settings):
            return [
                Suggestion("plain", "plain"),
                Suggestion("a", "a", override_start=EditorPosition(0, 1)),
                Suggestion("b", "b", override_start=EditorPosition(0, 2)),
            ]

    result = SuggestionAggregator(ProviderChain([Mixed()]), RejectList()).aggregate(_context(), config)
    assert result.anchor_start == EditorPosition(0, 1)


def test_provider_failure_is_isolated(config, caplog):
    chain = ProviderChain([ExplodingProvider(), FakeProvider(["world"])])
    with caplog.at_level(logging.WARNING):
        result = SuggestionAggregator(chain, RejectList()).aggregate(_context(), config)
    assert _names(result) == ["world"]
    assert "ExplodingProvider" in caplog.text


def test_malformed_override_is_dropped(config):
    class Inverted:
        blocks_all_other_providers = False

        def get_suggestions(self, context, settings):
            return [
                Suggestion("bad", "bad", override_start=EditorPosition(0, 5), override_end=EditorPosition(0, 1)),
                Suggestion("good", "good"),
            ]

    result = SuggestionAggregator(ProviderChain([Inverted()]), RejectList()).aggregate(_context(), config)
    assert _names(result) == ["good"]


def test_word_scenario_with_reject_list(make_config):
    settings = make_config(min_word_trigger_length=3)
    provider = DictionaryProvider(WordIndex({"w": ["world", "work", "wore"]}))
    aggregator = SuggestionAggregator(ProviderChain([provider]), RejectList(["work"]))
    result = aggregator.aggregate(_context("wor"), settings)
    assert _names(result) == ["world", "wore"]


def test_chain_order_is_fixed():
    a, b = FakeProvider(["a"]), FakeProvider(["b"])
    chain = ProviderChain([a, b])
    assert list(chain) == [a, b]
    assert len(chain) == 2


def test_empty_blocker_mid_chain_lets_later_providers_run(config):
    later = FakeProvider(["beta"])
    chain = ProviderChain([FakeProvider(["alpha"]), FakeProvider([], blocks=True), later])
    result = SuggestionAggregator(chain, RejectList()).aggregate(_context("a"), config)
    assert _names(result) == ["alpha", "beta"]
    assert result.blocked_by == ""
    assert later.calls == 1


def test_anchor_comes_only_from_the_blocking_provider(config):
    earlier = FakeProvider(["alpha"], override_start=EditorPosition(0, 0))
    blocker = FakeProvider(["note"], blocks=True)
    later = FakeProvider(["beta"])
    chain = ProviderChain([earlier, blocker, later])
    result = SuggestionAggregator(chain, RejectList()).aggregate(_context(), config)
    assert _names(result) == ["alpha", "note"]
    assert result.anchor_start == EditorPosition(0, 3)
    assert later.calls == 0
