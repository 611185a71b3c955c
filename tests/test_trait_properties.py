"""Property-based tests for trait selection and composition over the shipped configuration."""

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from app.config.loaders import load_trait_config_v1
from app.services.compositor import compose
from app.api.deps import get_fragment_store
from app.services.traits import select_for_config


CONFIG = load_trait_config_v1()

identifiers = st.one_of(
    st.integers(min_value=0, max_value=10**40),
    st.integers(min_value=0, max_value=10**6).map(str),
)


@pytest.mark.property
class TestSelectionProperties:
    @given(fid=identifiers)
    @settings(max_examples=200)
    def test_same_identifier_same_selection(self, fid):
        assert select_for_config(fid, CONFIG) == select_for_config(fid, CONFIG)

    @given(fid=identifiers)
    @settings(max_examples=200)
    def test_every_category_populated(self, fid):
        selection = select_for_config(fid, CONFIG)
        for category in CONFIG.order:
            assert selection[category] is not None

    @given(fid=identifiers)
    @settings(max_examples=300)
    def test_conflict_rules_hold(self, fid):
        selection = select_for_config(fid, CONFIG)
        for rule in CONFIG.rules.conflicts:
            trigger = selection.get(rule.category)
            if trigger is None or trigger.id not in rule.when:
                continue
            for target, denied in rule.deny.items():
                picked = selection.get(target)
                assert picked is None or picked.id not in denied

    @given(fid=identifiers)
    @settings(max_examples=300)
    def test_requirement_rules_hold(self, fid):
        selection = select_for_config(fid, CONFIG)
        for rule in CONFIG.rules.requirements:
            trigger = selection.get(rule.category)
            if trigger is None or trigger.id not in rule.when:
                continue
            assert selection[rule.target].id in rule.allowed

    @given(raw=st.text(max_size=40))
    @settings(max_examples=200)
    def test_arbitrary_text_never_raises(self, raw):
        selection = select_for_config(raw, CONFIG)
        assert len(selection) == len(CONFIG.order)


@pytest.mark.property
@given(fid=st.integers(min_value=0, max_value=10**12))
@settings(max_examples=50, suppress_health_check=[HealthCheck.too_slow])
def test_composition_is_idempotent(fid):
    store = get_fragment_store()
    selection = select_for_config(fid, CONFIG)
    first = compose(fid, selection, CONFIG.order, store, defaults=CONFIG.defaults, canvas_size=CONFIG.canvas_size)
    second = compose(fid, select_for_config(fid, CONFIG), CONFIG.order, store,
                     defaults=CONFIG.defaults, canvas_size=CONFIG.canvas_size)
    assert first == second
