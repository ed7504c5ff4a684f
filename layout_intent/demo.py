from typing import Callable, Dict

from . import (
    Box,
    DependentOperand,
    IterativeComponentReplacement,
    Layout,
    Length,
    Operation,
    Style,
    print_layout,
)


def two_boxes() -> Layout:
    """A cyan box and a box nobody references."""

    layout = Layout()
    basic = Box(Style(background='cyan'))
    layout.add_box(basic)
    basic.set_x(Length.px(0)).set_y(Length.px(0)).set_w(Length.px(200)).set_h(Length.px(200))

    useless = Box()
    layout.add_box(useless)
    useless.set_x(Length.px(50)).set_y(Length.px(50)).set_w(Length.px(100)).set_h(Length.px(100))
    return layout


def single_background() -> Layout:
    layout = Layout()
    box = Box(Style(background='red'))
    box.set_x(Length.px(10)).set_y(Length.px(20)).set_w(Length.px(300)).set_h(Length.px(40))
    layout.add_box(box)
    return layout


def stacked() -> Layout:
    """A second box placed 50px below the first one."""

    layout = Layout()
    top = Box(Style(background='white'))
    top.set_x(Length.px(0)).set_y(Length.px(0)).set_w(Length.pct(100)).set_h(Length.px(80))
    layout.add_box(top)

    below = Box(Style(background='grey'))
    layout.add_box(below)
    below.set_x(DependentOperand(Operation.EQUALS, [top.get_x()]))
    below.set_y(DependentOperand(Operation.ADD, [top.get_y(), top.get_h(), Length.px(50)]))
    below.set_w(Length.pct(100))
    below.set_h(Length.px(120))
    return layout


def anchored() -> Layout:
    """A styled box hanging off a plain box, which ends up stuck."""

    layout = Layout()
    anchor = Box()
    anchor.set_x(Length.px(0)).set_y(Length.px(0)).set_w(Length.px(640)).set_h(Length.px(480))
    layout.add_box(anchor)

    image = Box(Style(image='logo.png'))
    layout.add_box(image)
    image.set_x(DependentOperand(Operation.EQUALS, [anchor.get_x()]))
    image.set_y(DependentOperand(Operation.EQUALS, [anchor.get_y()]))
    image.set_w(DependentOperand(Operation.DIVIDE, [anchor.get_w(), 2]))
    image.set_h(Length.px(64))
    return layout


SCENARIOS: Dict[str, Callable[[], Layout]] = {
    'two-boxes': two_boxes,
    'single-background': single_background,
    'stacked': stacked,
    'anchored': anchored,
}


def run(name: str = 'two-boxes') -> bool:
    layout = SCENARIOS[name]()
    print(f"layout before:\n{print_layout(layout)}\n")
    result = IterativeComponentReplacement(layout).run()
    print(f"replacing end: {result}\n")
    print(f"layout after:\n{print_layout(layout)}")
    return result


if __name__ == "__main__":
    run()
