import logging

import pytest

from layout_intent import DependentOperand, Layout, Length, Box, Operation
from layout_intent.logging_utils import _safe_repr, debug_log_call

logger = logging.getLogger('layout_intent.tests')


def test_debug_log_call_traces_entry_and_exit(caplog):
    @debug_log_call(logger)
    def double(value):
        return value * 2

    with caplog.at_level(logging.DEBUG, logger='layout_intent.tests'):
        assert double(2) == 4

    assert 'Entering' in caplog.text
    assert 'Exiting' in caplog.text and '-> 4' in caplog.text


def test_debug_log_call_is_silent_above_debug(caplog):
    @debug_log_call(logger)
    def noop():
        return None

    with caplog.at_level(logging.INFO, logger='layout_intent.tests'):
        noop()

    assert caplog.text == ''


def test_debug_log_call_reraises(caplog):
    @debug_log_call(logger)
    def boom():
        raise ValueError('nope')

    with caplog.at_level(logging.DEBUG, logger='layout_intent.tests'):
        with pytest.raises(ValueError):
            boom()

    assert 'Exception in' in caplog.text


def test_graph_nodes_render_with_their_id():
    length = Length.px(4)
    assert _safe_repr(length) == f'Length#{length.id}<4px>'


def test_replace_constraint_is_traced(caplog):
    layout = Layout()
    box = Box()
    layout.add_box(box)
    box.set_x(Length.px(1))
    other = Box()
    layout.add_box(other)
    other.set_x(DependentOperand(Operation.EQUALS, [box.get_x()]))

    with caplog.at_level(logging.DEBUG, logger='layout_intent.layout'):
        box.set_x(Length.px(2))

    assert 'Entering Layout.replace_constraint' in caplog.text
    assert 'Cascading 1px -> 2px' in caplog.text
