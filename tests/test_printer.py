from layout_intent import (
    Box,
    Component,
    IdGenerator,
    IterativeComponentReplacement,
    Layout,
    Length,
    Repr,
    Style,
    print_layout,
    repr_to_string,
)


def test_nested_repr_is_dash_indented():
    tree = Repr('root', [Repr('a', [Repr('b')]), Repr('c')])
    assert repr_to_string(tree) == '- root\n-- a\n--- b\n-- c'


def test_unlabelled_nodes_collapse_into_parent_level():
    tree = Repr(None, [Repr('a'), Repr('b', [Repr('c')])])
    assert repr_to_string(tree) == '- a\n- b\n-- c'


def test_layout_tree_before_and_after_promotion():
    ids = IdGenerator()
    layout = Layout(ids=ids)
    box = Box(Style(background='red'), ids=ids)
    box.set_x(Length.px(0, ids=ids)).set_y(Length.px(5, ids=ids)).set_w(Length.px(10, ids=ids))
    layout.add_box(box)

    assert print_layout(layout) == '- box#1 (x: 0px, y: 5px, w: 10px, h: null)'

    IterativeComponentReplacement(layout).run()

    assert print_layout(layout) == (
        '- component#5 (x: 0px, y: 5px, w: 10px, h: null)\n'
        '-- replaces box#1'
    )


def test_component_tree_nests_its_children_layout():
    ids = IdGenerator()
    layout = Layout(ids=ids)
    component = Component(ids=ids)
    layout.add_box(component)
    component.set_x(Length.px(1, ids=ids))
    child = Box(ids=ids)
    child.set_w(Length.px(3, ids=ids))
    component.children_layout.add_box(child)

    assert component.children_layout.ids is ids
    assert print_layout(layout) == (
        '- component#1 (x: 1px, y: null, w: null, h: null)\n'
        '-- box#3 (x: null, y: null, w: 3px, h: null)'
    )
