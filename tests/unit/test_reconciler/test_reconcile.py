"""Unit tests for the reconciliation pass."""

from contextual_cards.cards.models import CardType, find_duplicate_names
from contextual_cards.reconciler.reconcile import (
    carry_over_cards,
    merge_cards,
    reconcile,
)
from tests.helpers.cards import make_card, names


class TestCarryOver:
    """Tests for carry_over_cards."""

    def test_untouched_types_are_kept(self) -> None:
        """Cards of types not in the update survive."""
        a = make_card("a", CardType.LEGACY_SUGGESTION)
        b = make_card("b", CardType.SLICE)

        kept = carry_over_cards([a, b], {CardType.SLICE})

        assert kept == [a]

    def test_empty_update_keeps_only_conditional_family(self) -> None:
        """An empty update drops every externally sourced card."""
        current = [
            make_card("cond", CardType.CONDITIONAL),
            make_card("slice", CardType.SLICE),
            make_card("header", CardType.CONDITIONAL_HEADER),
            make_card("suggestion", CardType.LEGACY_SUGGESTION),
            make_card("footer", CardType.CONDITIONAL_FOOTER),
        ]

        kept = carry_over_cards(current, set())

        assert names(kept) == ["cond", "header", "footer"]


class TestMerge:
    """Tests for merge_cards."""

    def test_targeted_update_replaces_only_its_type(self) -> None:
        """current {t1: a, t2: b} + {t2: c} merges to {a, c}."""
        a = make_card("a", CardType.LEGACY_SUGGESTION)
        b = make_card("b", CardType.SLICE)
        c = make_card("c", CardType.SLICE)

        merged = merge_cards([a, b], {CardType.SLICE: [c]})

        assert merged == [a, c]

    def test_carry_over_first_then_batches_in_order(self) -> None:
        """Batches follow carry-over in mapping order, each kept intact."""
        kept = make_card("kept", CardType.CONDITIONAL)
        s1 = make_card("s1", CardType.SLICE)
        s2 = make_card("s2", CardType.SLICE)
        g1 = make_card("g1", CardType.LEGACY_SUGGESTION)

        merged = merge_cards(
            [kept],
            {CardType.SLICE: [s1, s2], CardType.LEGACY_SUGGESTION: [g1]},
        )

        assert names(merged) == ["kept", "s1", "s2", "g1"]

    def test_empty_batch_clears_type(self) -> None:
        """A key with an empty batch removes all cards of that type."""
        slice_card = make_card("slice", CardType.SLICE)
        cond = make_card("cond", CardType.CONDITIONAL)

        merged = merge_cards([slice_card, cond], {CardType.SLICE: []})

        assert merged == [cond]

    def test_duplicates_are_not_removed(self) -> None:
        """Uniqueness is a producer contract; merge does not enforce it."""
        old = make_card("same", CardType.LEGACY_SUGGESTION)
        new = make_card("same", CardType.SLICE)

        merged = merge_cards([old], {CardType.SLICE: [new]})

        assert find_duplicate_names(merged) == ["same"]


class TestReconcile:
    """Tests for reconcile."""

    def test_result_is_sorted(self) -> None:
        """The merged list is returned in ranking order."""
        current = [make_card("old", CardType.LEGACY_SUGGESTION, ranking_score=0.2)]
        update = {CardType.SLICE: [make_card("new", ranking_score=0.8)]}

        assert names(reconcile(current, update)) == ["new", "old"]

    def test_empty_update_with_conditional_and_slice(self) -> None:
        """Only the conditional card survives an empty update."""
        current = [
            make_card("cond", CardType.CONDITIONAL),
            make_card("slice", CardType.SLICE),
        ]

        result = reconcile(current, {})

        assert len(result) == 1
        assert result[0].card_type == CardType.CONDITIONAL

    def test_empty_update_keeps_header(self) -> None:
        """A lone conditional header survives an empty update."""
        header = make_card("header", CardType.CONDITIONAL_HEADER)
        assert reconcile([header], {}) == [header]

    def test_empty_update_keeps_footer(self) -> None:
        """A lone conditional footer survives an empty update."""
        footer = make_card("footer", CardType.CONDITIONAL_FOOTER)
        assert reconcile([footer], {}) == [footer]

    def test_same_update_twice_is_idempotent(self) -> None:
        """Re-applying an identical update does not accumulate cards."""
        update = {
            CardType.SLICE: [make_card("s1", ranking_score=1), make_card("s2")],
            CardType.LEGACY_SUGGESTION: [
                make_card("g1", CardType.LEGACY_SUGGESTION, ranking_score=0.5)
            ],
        }

        first = reconcile([], update)
        second = reconcile(first, update)

        assert second == first
        assert find_duplicate_names(second) == []

    def test_updates_to_unrelated_types_commute(self) -> None:
        """Applying per-type updates in either order gives the same list."""
        slices = {CardType.SLICE: [make_card("s", ranking_score=0.3)]}
        suggestions = {
            CardType.LEGACY_SUGGESTION: [
                make_card("g", CardType.LEGACY_SUGGESTION, ranking_score=0.6)
            ]
        }

        one_way = reconcile(reconcile([], slices), suggestions)
        other_way = reconcile(reconcile([], suggestions), slices)

        assert names(one_way) == names(other_way) == ["g", "s"]
