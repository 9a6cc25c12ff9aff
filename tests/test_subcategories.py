from cardrewards.domain.flags import UNFLAGGED, FlagColor
from cardrewards.engine.subcategories import create_subcategory_context, resolve_subcategory


def test_context_filters_inactive_and_sorts_by_priority(make_card, make_subcategory) -> None:
    card = make_card(
        subcategories=[
            make_subcategory(id="b", flag_color="green", priority=2),
            make_subcategory(id="a", flag_color="red", priority=1),
            make_subcategory(id="c", flag_color="yellow", priority=3, active=False),
            make_subcategory(id="fallback", flag_color="unflagged", priority=0),
        ]
    )

    context = create_subcategory_context(card)

    assert context.enabled is True
    assert [sub.id for sub in context.active_subcategories] == ["fallback", "a", "b"]
    assert context.fallback.id == "fallback"
    assert FlagColor.YELLOW not in context.map


def test_missing_active_flag_counts_as_active(make_card, make_subcategory) -> None:
    card = make_card(subcategories=[make_subcategory(id="x", flag_color="blue", active=None), None])

    context = create_subcategory_context(card)

    assert [sub.id for sub in context.active_subcategories] == ["x"]
    assert context.fallback is None


def test_context_is_empty_when_subcategories_disabled(make_card, make_subcategory) -> None:
    for enabled in (False, None):
        card = make_card(subcategories_enabled=enabled, subcategories=[make_subcategory(id="x")])

        context = create_subcategory_context(card)

        assert context.enabled is False
        assert context.active_subcategories == []
        assert context.map == {}
        assert context.fallback is None


def test_highest_priority_value_wins_shared_flag(make_card, make_subcategory) -> None:
    card = make_card(
        subcategories=[
            make_subcategory(id="late", flag_color="blue", priority=5),
            make_subcategory(id="early", flag_color="blue", priority=1),
            make_subcategory(id="middle", flag_color="blue", priority=3),
        ]
    )

    context = create_subcategory_context(card)

    assert resolve_subcategory(context, FlagColor.BLUE).id == "late"


def test_equal_priorities_keep_input_order(make_card, make_subcategory) -> None:
    card = make_card(
        subcategories=[
            make_subcategory(id="first", flag_color="red", priority=1),
            make_subcategory(id="second", flag_color="red", priority=1),
        ]
    )

    context = create_subcategory_context(card)

    assert [sub.id for sub in context.active_subcategories] == ["first", "second"]
    assert resolve_subcategory(context, FlagColor.RED).id == "second"


def test_resolve_returns_match_or_fallback(make_card, make_subcategory) -> None:
    card = make_card(
        subcategories=[
            make_subcategory(id="fallback", flag_color="unflagged", priority=0),
            make_subcategory(id="blue", flag_color="blue", priority=1),
        ]
    )

    context = create_subcategory_context(card)

    assert resolve_subcategory(context, FlagColor.BLUE).id == "blue"
    assert resolve_subcategory(context, FlagColor.PURPLE).id == "fallback"
    assert resolve_subcategory(context, UNFLAGGED).id == "fallback"


def test_resolve_without_fallback_returns_none(make_card, make_subcategory) -> None:
    card = make_card(subcategories=[make_subcategory(id="blue", flag_color="blue")])

    context = create_subcategory_context(card)

    assert resolve_subcategory(context, FlagColor.GREEN) is None


def test_resolve_is_bypassed_when_disabled(make_card, make_subcategory) -> None:
    card = make_card(
        subcategories_enabled=False,
        subcategories=[make_subcategory(id="blue", flag_color="blue")],
    )

    context = create_subcategory_context(card)

    assert resolve_subcategory(context, FlagColor.BLUE) is None


def test_subcategory_flags_are_normalised_on_load(make_subcategory) -> None:
    assert make_subcategory(flag_color="BLUE").flag_color is FlagColor.BLUE
    assert make_subcategory(flag_color="sparkly").flag_color is UNFLAGGED
    assert make_subcategory(flag_color=None).flag_color is UNFLAGGED
