"""Tests for CandidateDelta and the AmbiguityResolver."""

from collections import Counter

import pytest

from catan_tracker.core.resolver import (
    AmbiguityResolver,
    CandidateDelta,
    ReviewStatus,
)
from catan_tracker.core.resources import RESOURCE_KINDS, ResourceKind, ResourceVector


def seed(ledger, **holdings):
    """Register players in keyword order with the given {kind: count} dicts."""
    for player, amounts in holdings.items():
        ledger.ensure(player)
        ledger.apply_vector(player, ResourceVector.from_dict(amounts))


class TestCandidateDelta:

    def test_identity(self):
        delta = CandidateDelta.identity(3)
        assert len(delta.rows) == 3
        assert delta.is_identity()

    def test_transfer_moves_one_unit(self):
        delta = CandidateDelta.transfer(3, to_index=0, from_index=2, kind=ResourceKind.ORE)
        assert delta.row(0)[ResourceKind.ORE] == 1
        assert delta.row(2)[ResourceKind.ORE] == -1
        assert delta.row(1).is_zero()
        assert not delta.is_identity()

    def test_addition_is_a_new_value(self):
        a = CandidateDelta.transfer(2, 0, 1, ResourceKind.WOOD)
        b = CandidateDelta.transfer(2, 0, 1, ResourceKind.WOOD)
        combined = a + b
        assert combined.row(0)[ResourceKind.WOOD] == 2
        assert a.row(0)[ResourceKind.WOOD] == 1

    def test_addition_pads_shorter_matrix(self):
        small = CandidateDelta.transfer(2, 0, 1, ResourceKind.WOOD)
        large = CandidateDelta.transfer(3, 2, 0, ResourceKind.SHEEP)
        combined = small + large
        assert len(combined.rows) == 3
        assert combined.row(2)[ResourceKind.SHEEP] == 1

    def test_rows_past_the_end_are_zero(self):
        delta = CandidateDelta.transfer(2, 0, 1, ResourceKind.WOOD)
        assert delta.row(5).is_zero()
        holdings = [ResourceVector.zero()] * 3
        applied = delta.apply_to(holdings)
        assert len(applied) == 3
        assert applied[2].is_zero()

    def test_to_lists(self):
        delta = CandidateDelta.transfer(2, 1, 0, ResourceKind.BRICK)
        assert delta.to_lists() == [[0, -1, 0, 0, 0], [0, 1, 0, 0, 0]]


class TestAddHint:

    def test_one_hint_gives_one_candidate_per_kind(self, resolver):
        assert resolver.add_hint(0, 1, 3) == len(RESOURCE_KINDS)
        kinds = {
            kind
            for c in resolver.candidates
            for kind in RESOURCE_KINDS
            if c.row(0)[kind] == 1
        }
        assert kinds == set(RESOURCE_KINDS)

    def test_hints_combine_as_cross_product(self, resolver):
        resolver.add_hint(0, 1, 3)
        assert resolver.add_hint(2, 1, 3) == 25

    def test_repeat_hint_keeps_distinct_matrices(self, resolver):
        resolver.add_hint(0, 1, 3)
        # sheep then ore and ore then sheep end in the same matrix
        assert resolver.add_hint(0, 1, 3) == 15
        assert len(set(resolver.candidates)) == 15

    def test_has_hypotheses(self, resolver):
        assert not resolver.has_hypotheses()
        resolver.add_hint(0, 1, 2)
        assert resolver.has_hypotheses()
        resolver.clear()
        assert not resolver.has_hypotheses()


class TestReview:

    def test_idle_without_candidates(self, resolver, ledger):
        outcome = resolver.review(ledger)
        assert outcome.status == ReviewStatus.IDLE
        assert not outcome.changed_ledger

    def test_single_kind_victim_commits(self, resolver, ledger):
        """Victim holds only sheep, so the steal must have been sheep."""
        seed(ledger, Alice={}, Bob={"sheep": 1}, Carol={"wheat": 2})
        resolver.add_hint(0, 1, 3)

        outcome = resolver.review(ledger)

        assert outcome.status == ReviewStatus.COMMITTED
        assert outcome.candidates_before == 5
        assert outcome.changed_ledger
        assert ledger.get("Alice")[ResourceKind.SHEEP] == 1
        assert ledger.get("Bob")[ResourceKind.SHEEP] == 0
        assert not resolver.has_hypotheses()

    def test_two_kind_victim_stays_pending(self, resolver, ledger):
        seed(ledger, Alice={}, Bob={"wood": 1, "ore": 1}, Carol={})
        resolver.add_hint(0, 1, 3)

        outcome = resolver.review(ledger)

        assert outcome.status == ReviewStatus.PENDING
        assert outcome.candidates_after == 2
        assert outcome.message == "2 potential theft deltas remaining"
        assert ledger.get("Alice").is_zero()

    def test_review_is_idempotent(self, resolver, ledger):
        seed(ledger, Alice={}, Bob={"wood": 1, "ore": 1})
        resolver.add_hint(0, 1, 2)
        resolver.review(ledger)
        first = resolver.candidates
        resolver.review(ledger)
        assert resolver.candidates == first

    def test_candidate_set_only_shrinks(self, resolver, ledger):
        seed(ledger, Alice={}, Bob={"wood": 1, "brick": 1, "ore": 1})
        resolver.add_hint(0, 1, 2)
        resolver.review(ledger)
        assert len(resolver.candidates) == 3

        ledger.apply_delta("Bob", ResourceKind.BRICK, -1)
        resolver.review(ledger)
        assert len(resolver.candidates) == 2

    def test_joint_feasibility_drops_combined_overdraw(self, resolver, ledger):
        """Two steals from a victim holding one card cannot both have happened."""
        seed(ledger, Alice={}, Bob={"wood": 1}, Carol={})
        resolver.add_hint(0, 1, 3)
        resolver.add_hint(2, 1, 3)

        outcome = resolver.review(ledger)

        assert outcome.status == ReviewStatus.INFEASIBLE
        assert outcome.candidates_before == 25
        assert outcome.message == "Couldn't resolve thefts - potential parsing bug"
        assert not resolver.has_hypotheses()
        assert ledger.get("Bob")[ResourceKind.WOOD] == 1

    def test_joint_feasibility_keeps_valid_orderings(self, resolver, ledger):
        seed(ledger, Alice={}, Bob={"wood": 1, "ore": 1}, Carol={})
        resolver.add_hint(0, 1, 3)
        resolver.add_hint(2, 1, 3)

        outcome = resolver.review(ledger)

        assert outcome.status == ReviewStatus.PENDING
        assert outcome.candidates_after == 2
        for candidate in resolver.candidates:
            assert candidate.row(1).to_dict() == {
                "wood": -1, "brick": 0, "sheep": 0, "wheat": 0, "ore": -1,
            }

    def test_cancelling_steals_are_dropped(self, resolver, ledger):
        """A steal and a steal back of the same kind sum to nothing moved."""
        seed(ledger, Alice={"wood": 1}, Bob={"wood": 1})
        resolver.add_hint(0, 1, 2)
        resolver.add_hint(1, 0, 2)

        outcome = resolver.review(ledger)

        assert outcome.status == ReviewStatus.INFEASIBLE

    def test_contradiction_leaves_ledger_untouched(self, ledger):
        class PermissiveResolver(AmbiguityResolver):
            def _is_feasible(self, candidate, holdings):
                return candidate.row(0)[ResourceKind.WOOD] == 1

        resolver = PermissiveResolver()
        seed(ledger, Alice={}, Bob={})
        resolver.add_hint(0, 1, 2)

        outcome = resolver.review(ledger)

        assert outcome.status == ReviewStatus.CONTRADICTION
        assert outcome.is_fatal
        assert outcome.committed is not None
        assert outcome.message == "Couldn't resolve thefts correctly"
        assert ledger.get("Bob").is_zero()
        assert not resolver.has_hypotheses()


class TestSummary:

    def test_no_hypotheses(self, resolver):
        summary = resolver.summary(0)
        assert summary.gained == Counter({0: 1})
        assert summary.lost == Counter({0: 1})

    def test_pending_gains_and_losses(self, resolver, ledger):
        seed(ledger, Alice={}, Bob={"wood": 1, "ore": 1}, Carol={})
        resolver.add_hint(0, 1, 3)
        resolver.review(ledger)

        assert resolver.summary(0).gained == Counter({1: 2})
        assert resolver.summary(1).lost == Counter({-1: 2})
        assert resolver.summary(2).gained == Counter({0: 2})

    def test_possible_changes(self, resolver, ledger):
        seed(ledger, Alice={}, Bob={"wood": 1, "ore": 1})
        resolver.add_hint(0, 1, 2)
        resolver.review(ledger)

        assert resolver.possible_changes(1, ResourceKind.WOOD) == {-1}
        assert resolver.possible_changes(0, ResourceKind.ORE) == {1}
        assert resolver.possible_changes(0, ResourceKind.BRICK) == set()

    @pytest.mark.parametrize("player_index", [0, 1])
    def test_summary_counts_every_candidate(self, resolver, player_index):
        resolver.add_hint(0, 1, 2)
        summary = resolver.summary(player_index)
        assert sum(summary.gained.values()) == 5
        assert sum(summary.lost.values()) == 5
