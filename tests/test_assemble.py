"""Tests for pulse item assembly."""

from __future__ import annotations

from unittest.mock import MagicMock

from pulse.errors import AssemblyError
from pulse.models import PulseCategory, RawSourceItem, SourceMetadata
from pulse.process.assemble import PulseAssembler
from pulse.process.scoring import AuthorityScorer


def test_end_to_end_paper():
    item = RawSourceItem(
        title="<b>AI Breakthrough</b>",
        summary="",
        url="https://arxiv.org/abs/1",
        source_name="arXiv",
        raw_category="arxiv paper",
        metadata=SourceMetadata(cited_by_count=200),
    )
    signal = PulseAssembler().assemble(item)

    assert signal.title == "AI Breakthrough"
    assert signal.content_type == PulseCategory.PAPER
    assert signal.authority_score == 10.0
    assert signal.is_high_value is True
    assert signal.veracity_verified is False
    assert signal.id is None
    assert signal.created_at is None
    assert signal.content_hash == ""


def test_url_and_source_name_pass_through():
    item = RawSourceItem(
        title="t",
        summary="s",
        url="  https://x.com/<raw>  ",
        source_name="  <i>Raw</i> Name ",
        raw_category="news",
    )
    signal = PulseAssembler().assemble(item)
    assert signal.url == "  https://x.com/<raw>  "
    assert signal.source_name == "  <i>Raw</i> Name "


def test_summary_normalized():
    item = RawSourceItem(
        title="t",
        summary="<p>Stocks   rose\\non Tuesday.</p>",
        url="u",
        source_name="Reuters",
        raw_category="Reuters Top Stories",
    )
    assert PulseAssembler().assemble(item).summary == "Stocks rose on Tuesday."


def test_null_text_fields_degrade_to_empty():
    item = RawSourceItem(title=None, summary=None, url="u", source_name="s", raw_category=None)
    signal = PulseAssembler().assemble(item)
    assert signal.title == ""
    assert signal.summary == ""
    assert signal.content_type == PulseCategory.TREND
    assert signal.authority_score == 3.0


def test_trusted_news_not_high_value():
    item = RawSourceItem(
        title="t", summary="s", url="u", source_name="Nature",
        raw_category="news", metadata=SourceMetadata(source_name="Nature"),
    )
    signal = PulseAssembler().assemble(item)
    assert signal.authority_score == 8.0
    assert signal.is_high_value is False


def test_high_value_tracks_threshold(sample_items):
    batch = PulseAssembler().assemble_batch(sample_items)
    assert not batch.failures
    for signal in batch.signals:
        assert signal.is_high_value == (signal.authority_score >= 8.5)


def test_batch_categories(sample_items):
    batch = PulseAssembler().assemble_batch(sample_items)
    assert [s.content_type for s in batch.signals] == [
        PulseCategory.PAPER,
        PulseCategory.PAPER,
        PulseCategory.NEWS,
        PulseCategory.ANALYSIS,
        PulseCategory.TREND,
    ]
    assert [s.authority_score for s in batch.signals] == [10.0, 10.0, 7.0, 6.0, 3.0]


def test_batch_isolates_failures(sample_items):
    scorer = AuthorityScorer()
    flaky = MagicMock(wraps=scorer)
    flaky.is_high_value.side_effect = scorer.is_high_value
    calls = {"n": 0}

    def score(category, metadata):
        calls["n"] += 1
        if calls["n"] == 2:
            raise RuntimeError("bad metadata")
        return scorer.score(category, metadata)

    flaky.score.side_effect = score
    batch = PulseAssembler(scorer=flaky).assemble_batch(sample_items)

    assert len(batch.signals) == 4
    assert len(batch.failures) == 1
    failure = batch.failures[0]
    assert failure.index == 1
    assert failure.item is sample_items[1]
    assert isinstance(failure.error, AssemblyError)
    assert failure.error.index == 1
    assert isinstance(failure.error.__cause__, RuntimeError)


def test_batch_survives_malformed_item(sample_items):
    items = [sample_items[0], object(), sample_items[2]]
    batch = PulseAssembler().assemble_batch(items)  # type: ignore[arg-type]
    assert len(batch.signals) == 2
    assert batch.failures[0].index == 1
