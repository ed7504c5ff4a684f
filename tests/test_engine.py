import pytest

from layout_intent import (
    Box,
    Component,
    ComponentReplacement,
    DependentOperand,
    DriverConfig,
    DriverState,
    IterativeComponentReplacement,
    Layout,
    LayoutError,
    Length,
    Operation,
    ReplacementError,
    Style,
    UnsupportedReplacementError,
    get_driver_config,
    set_driver_config,
    transitive_dependents,
    useless_box,
    validate_layout,
)
from layout_intent.demo import anchored, single_background, stacked, two_boxes


def fixed_box(layout, style=None):
    box = Box(style)
    layout.add_box(box)
    box.set_x(Length.px(0)).set_y(Length.px(0)).set_w(Length.px(10)).set_h(Length.px(10))
    return box


def components(layout):
    return [box for box in layout.get_boxes() if isinstance(box, Component)]


def run(layout, **kwargs):
    kwargs.setdefault('config', DriverConfig(check_invariants=True))
    driver = IterativeComponentReplacement(layout, **kwargs)
    return driver, driver.run()


def test_single_background_box_becomes_one_component():
    layout = single_background()
    box = layout.get_boxes()[0]
    originals = box.constraints()

    driver, done = run(layout)

    assert done
    assert driver.state is DriverState.DONE
    [component] = layout.get_boxes()
    assert isinstance(component, Component)
    cloned = component.constraints()
    assert len(cloned) == 4
    for original, clone in zip(originals, cloned):
        assert clone is not original
        assert (clone.value, clone.unit) == (original.value, original.unit)
    assert [applied.pattern_name for applied in driver.history] == ['has_background']


def test_styled_box_promoted_and_unreferenced_box_deleted():
    layout = two_boxes()
    styled, plain = layout.get_boxes()

    driver, done = run(layout)

    assert done
    assert len(layout.get_boxes()) == 1
    assert len(components(layout)) == 1
    assert [(a.pattern_name, a.box_ids) for a in driver.history] == [
        ('has_background', (styled.id,)),
        ('useless_box', (plain.id,)),
    ]
    assert driver.history[1].component_id is None


def test_dependents_are_rewritten_before_their_box_is_promoted():
    layout = stacked()
    top, below = layout.get_boxes()
    gap = below.get_y().operands[2]
    snapshots = []

    def observe(current, step):
        if step == 1 and not snapshots:
            [first] = components(current)
            snapshots.append((first, below.get_x(), below.get_y()))

    driver, done = run(layout, on_step=observe)

    assert done
    first, x, y = snapshots[0]
    assert x.operation is Operation.EQUALS and x.operands == (first.get_x(),)
    assert y.operation is Operation.ADD
    assert y.operands == (first.get_y(), first.get_h(), gap)

    assert len(components(layout)) == 2
    second = components(layout)[1]
    assert second.get_x().operands == (first.get_x(),)
    assert driver.steps == 2


def test_box_with_dependents_is_deleted_only_after_them():
    layout = Layout()
    box1 = fixed_box(layout)
    box2 = fixed_box(layout)
    box2.set_w(DependentOperand(Operation.ADD, [box1.get_w(), 5]))

    driver, done = run(layout)

    assert done
    assert layout.get_boxes() == []
    assert [a.box_ids for a in driver.history] == [(box2.id,), (box1.id,)]


def test_stuck_is_a_normal_result():
    layout = anchored()

    driver, done = run(layout)

    assert done is False
    assert driver.state is DriverState.STUCK
    [component] = components(layout)
    plain = [box for box in layout.get_boxes() if not isinstance(box, Component)]
    assert len(plain) == 1
    assert component.get_x().operands == (plain[0].get_x(),)


def test_components_are_never_deleted():
    layout = Layout()
    existing = Component()
    existing.set_x(Length.px(0))
    layout.add_box(existing)
    plain = fixed_box(layout)

    driver, done = run(layout, patterns=[useless_box])

    assert done
    assert layout.get_boxes() == [existing]
    assert driver.history[0].box_ids == (plain.id,)


def test_running_again_after_done_does_nothing():
    layout = two_boxes()
    driver, _ = run(layout)
    before = list(layout.get_boxes())

    assert driver.run()
    assert driver.steps == 2
    assert layout.get_boxes() == before


@pytest.mark.parametrize('build', [single_background, two_boxes, stacked, anchored])
def test_steps_bounded_by_box_count(build):
    layout = build()
    box_count = len(layout.get_boxes())

    driver, _ = run(layout)

    assert driver.steps <= box_count
    validate_layout(layout)


def test_observer_runs_before_each_scan_and_on_done():
    calls = []
    layout = single_background()

    run(layout, on_step=lambda current, step: calls.append(step))

    assert calls == [0, 1, 1]


def test_empty_pattern_list_is_stuck_immediately():
    layout = two_boxes()
    driver, done = run(layout, patterns=[])
    assert not done
    assert driver.steps == 0


def test_max_steps_guard():
    with pytest.raises(LayoutError):
        run(two_boxes(), config=DriverConfig(max_steps=1))


def test_module_config_is_used_by_default():
    saved = get_driver_config()
    try:
        set_driver_config(DriverConfig(max_steps=0))
        with pytest.raises(LayoutError):
            IterativeComponentReplacement(single_background()).run()
    finally:
        set_driver_config(saved)


def test_cascade_reaches_every_dependent_chain():
    layout = Layout()
    box1 = fixed_box(layout, Style(background='red'))
    box2 = fixed_box(layout)
    box3 = fixed_box(layout, Style(background='green'))
    box2.set_x(DependentOperand(Operation.EQUALS, [box1.get_x()]))
    box3.set_x(DependentOperand(Operation.ADD, [box2.get_x(), 5]))

    driver, done = run(layout)

    # box2 stays: it is plain and the promoted box3 still references it.
    assert not done
    first, third = components(layout)
    assert box2.get_x().operands == (first.get_x(),)
    assert third.get_x().operands == (box2.get_x(), 5)
    assert third.get_x() in transitive_dependents(layout, first.get_x())


def test_component_clone_of_self_referencing_box():
    layout = Layout()
    box = fixed_box(layout, Style(background='red'))
    box.set_w(DependentOperand(Operation.SUBTRACT, [Length.px(500), box.get_x()]))

    _, done = run(layout)

    assert done
    [component] = layout.get_boxes()
    assert component.get_w().operands[1] is component.get_x()


def test_deletion_drops_dependent_bindings():
    layout = Layout()
    box1 = fixed_box(layout)
    box2 = fixed_box(layout)
    box2.set_x(DependentOperand(Operation.EQUALS, [box1.get_x()]))

    def delete_box1(box):
        return ComponentReplacement(None, [box]) if box is box1 else None

    driver, done = run(layout, patterns=[delete_box1])

    assert not done
    assert layout.get_boxes() == [box2]
    assert box2.get_x() is None


def test_deletion_with_transitive_dependents_fails():
    layout = Layout()
    box1 = fixed_box(layout)
    box2 = fixed_box(layout)
    box3 = fixed_box(layout)
    box2.set_x(DependentOperand(Operation.EQUALS, [box1.get_x()]))
    box3.set_x(DependentOperand(Operation.EQUALS, [box2.get_x()]))

    def delete_box1(box):
        return ComponentReplacement(None, [box]) if box is box1 else None

    with pytest.raises(ReplacementError):
        run(layout, patterns=[delete_box1])


def test_multi_box_promotion_fails_explicitly():
    layout = Layout()
    box1 = fixed_box(layout)
    box2 = fixed_box(layout)
    box3 = fixed_box(layout)
    box2.set_x(DependentOperand(Operation.EQUALS, [box1.get_x()]))

    def merge(box):
        if box is not box1:
            return None
        return ComponentReplacement(Component.clone_from_box(box1), [box1, box3])

    with pytest.raises(UnsupportedReplacementError):
        run(layout, patterns=[merge])


def test_step_cap_stops_before_a_pattern_adds_a_component():
    layout = single_background()

    with pytest.raises(LayoutError):
        run(layout, config=DriverConfig(max_steps=0))

    assert components(layout) == []
    assert len(layout.get_boxes()) == 1
