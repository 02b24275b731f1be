"""Tests for chrono_tags.engine.evaluator: the decision table."""

from __future__ import annotations

from datetime import timedelta

from structlog.testing import capture_logs

from chrono_tags.catalog import Comparison, Predicate, RuleCatalog, TagDefinition, TagIds
from chrono_tags.core.enums import TagCategory, TransitionKind, Visibility
from chrono_tags.engine.evaluator import evaluate
from chrono_tags.engine.transitions import TransitionRecord


class TestTimeTags:
    def test_newcomer_added_then_removed(self, catalog, make_snapshot):
        young = make_snapshot(age_days=3)
        assert evaluate(set(), young, catalog) == [TransitionRecord.add("u1", TagIds.RECEM_CHEGADO)]

        old = make_snapshot(age_days=8)
        assert evaluate({TagIds.RECEM_CHEGADO}, old, catalog) == [
            TransitionRecord.remove("u1", TagIds.RECEM_CHEGADO)
        ]

    def test_newcomer_on_day_seven_stays(self, catalog, make_snapshot):
        assert evaluate({TagIds.RECEM_CHEGADO}, make_snapshot(age_days=7), catalog) == []

    def test_veteran_requires_both_conditions(self, catalog, make_snapshot):
        posting = {TagIds.ATIVO, TagIds.PROLIFICO, TagIds.CRIADOR}
        assert evaluate(posting, make_snapshot(age_days=400, total_posts=99), catalog) == []
        assert evaluate(posting, make_snapshot(age_days=400, total_posts=100), catalog) == [
            TransitionRecord.add("u1", TagIds.VETERANO)
        ]


class TestLapsedTags:
    def test_popular_lapses_without_removal_rule(self, catalog, make_snapshot):
        transitions = evaluate({TagIds.POPULAR}, make_snapshot(reactions_received=10), catalog)
        assert transitions == [TransitionRecord.remove("u1", TagIds.POPULAR)]

    def test_popular_kept_while_condition_holds(self, catalog, make_snapshot):
        held = {TagIds.POPULAR, TagIds.VIRAL}
        assert evaluate(held, make_snapshot(reactions_received=6000), catalog) == []


class TestManualTags:
    def test_verified_never_auto_acquired(self, catalog, make_snapshot):
        assert evaluate(set(), make_snapshot(is_verified=True), catalog) == []

    def test_verified_never_auto_removed(self, catalog, make_snapshot):
        assert evaluate({TagIds.VERIFICADO}, make_snapshot(is_verified=False), catalog) == []

    def test_banned_kept_after_override_cleared(self, catalog, make_snapshot):
        assert evaluate({TagIds.BANIDO}, make_snapshot(overrides=frozenset()), catalog) == []

    def test_warning_expires(self, catalog, make_snapshot, now):
        fresh = make_snapshot(last_warning_at=now - timedelta(days=10))
        stale = make_snapshot(last_warning_at=now - timedelta(days=61))
        assert evaluate({TagIds.ADVERTIDO}, fresh, catalog) == []
        assert evaluate({TagIds.ADVERTIDO}, stale, catalog) == [
            TransitionRecord.remove("u1", TagIds.ADVERTIDO)
        ]

    def test_manual_tag_not_held_and_removal_true_is_noop(self, catalog, make_snapshot, now):
        stale = make_snapshot(last_warning_at=now - timedelta(days=90))
        assert evaluate(set(), stale, catalog) == []


class TestSilence:
    def test_silence_lifecycle(self, catalog, make_snapshot, now):
        active = make_snapshot(silenced_until=now + timedelta(days=1))
        expired = make_snapshot(silenced_until=now - timedelta(minutes=1))

        assert evaluate(set(), active, catalog) == [TransitionRecord.add("u1", TagIds.SILENCIADO)]
        assert evaluate({TagIds.SILENCIADO}, active, catalog) == []
        assert evaluate({TagIds.SILENCIADO}, expired, catalog) == [
            TransitionRecord.remove("u1", TagIds.SILENCIADO)
        ]


class TestSpam:
    def test_needs_flag_and_spam_posts(self, catalog, make_snapshot):
        flagged = frozenset({"spam"})
        assert evaluate(set(), make_snapshot(overrides=flagged, spam_posts=4), catalog) == []
        assert evaluate(set(), make_snapshot(spam_posts=50), catalog) == []
        assert evaluate(set(), make_snapshot(overrides=flagged, spam_posts=5), catalog) == [
            TransitionRecord.add("u1", TagIds.SPAM)
        ]

    def test_only_removed_manually(self, catalog, make_snapshot):
        assert evaluate({TagIds.SPAM}, make_snapshot(spam_posts=0), catalog) == []


class TestActivityTags:
    def test_post_count_thresholds(self, catalog, make_snapshot):
        def added(total_posts: int) -> list[str]:
            snapshot = make_snapshot(total_posts=total_posts)
            return [t.tag_id for t in evaluate(set(), snapshot, catalog)]

        assert added(0) == []
        assert added(1) == [TagIds.ATIVO]
        assert added(6) == [TagIds.ATIVO, TagIds.CRIADOR]
        assert added(11) == [TagIds.ATIVO, TagIds.PROLIFICO, TagIds.CRIADOR]

    def test_supporter_and_influencer(self, catalog, make_snapshot):
        snapshot = make_snapshot(likes_given=1, followers=6)
        assert [t.tag_id for t in evaluate(set(), snapshot, catalog)] == [
            TagIds.INFLUENTE,
            TagIds.APOIADOR,
        ]
        assert evaluate(set(), make_snapshot(followers=5), catalog) == []

    def test_viral_lapses_with_reactions(self, catalog, make_snapshot):
        assert evaluate(set(), make_snapshot(reactions_received=11), catalog) == [
            TransitionRecord.add("u1", TagIds.VIRAL)
        ]
        assert evaluate({TagIds.VIRAL}, make_snapshot(reactions_received=10), catalog) == [
            TransitionRecord.remove("u1", TagIds.VIRAL)
        ]


class TestInvariants:
    def test_catalog_order_and_determinism(self, catalog, make_snapshot, now):
        snapshot = make_snapshot(
            age_days=2,
            reactions_received=9000,
            silenced_until=now + timedelta(hours=2),
            overrides=frozenset({"founder", "banned"}),
        )
        first = evaluate(set(), snapshot, catalog)
        second = evaluate(set(), snapshot, catalog)

        assert first == second
        assert [t.tag_id for t in first] == [
            TagIds.POPULAR,
            TagIds.VIRAL,
            TagIds.SILENCIADO,
            TagIds.BANIDO,
            TagIds.RECEM_CHEGADO,
            TagIds.FUNDADOR,
        ]
        assert all(t.kind is TransitionKind.ADD for t in first)

    def test_no_redundant_transitions(self, catalog, make_snapshot):
        snapshot = make_snapshot(age_days=2)
        held = {TagIds.RECEM_CHEGADO}
        assert evaluate(held, snapshot, catalog) == []

    def test_unknown_held_tags_are_ignored(self, catalog, make_snapshot):
        assert evaluate({"legacy-tag"}, make_snapshot(), catalog) == []

    def test_input_set_not_mutated(self, catalog, make_snapshot):
        held = {TagIds.POPULAR}
        evaluate(held, make_snapshot(), catalog)
        assert held == {TagIds.POPULAR}


class TestInconsistentDefinitions:
    def _catalog(self) -> RuleCatalog:
        return RuleCatalog(
            [
                TagDefinition(
                    id="contradictory",
                    name="Contraditório",
                    category=TagCategory.STYLE,
                    visibility=Visibility.INTERNAL,
                    acquisition=Predicate.all_of(Comparison("total_posts", ">=", 1)),
                    removal=Predicate.all_of(Comparison("reactions_received", ">=", 1)),
                )
            ]
        )

    def test_removal_wins_for_held_tag(self, make_snapshot):
        snapshot = make_snapshot(total_posts=5, reactions_received=5)
        with capture_logs() as logs:
            transitions = evaluate({"contradictory"}, snapshot, self._catalog())

        assert transitions == [TransitionRecord.remove("u1", "contradictory")]
        assert any(entry["event"] == "catalog.inconsistent" for entry in logs)

    def test_not_added_when_both_hold(self, make_snapshot):
        snapshot = make_snapshot(total_posts=5, reactions_received=5)
        with capture_logs() as logs:
            transitions = evaluate(set(), snapshot, self._catalog())

        assert transitions == []
        assert [entry["log_level"] for entry in logs] == ["warning"]
