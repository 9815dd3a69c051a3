"""
Form Fill module - field level primitives over a Playwright page

All helpers take an opaque selector string and never assume how the page
locates elements beyond that.
"""

from atsfill_core.form_fill.field_filler import (
    APPEND_VALUE_JS,
    SET_VALUE_JS,
    check_by_value,
    count_matches,
    fill_text,
    radio_selector,
    read_attribute,
    read_text,
    read_toggle_state,
    select_value,
    set_file,
    set_value_with_events,
    wait_for_required_selector,
)

__all__ = [
    'APPEND_VALUE_JS',
    'SET_VALUE_JS',
    'check_by_value',
    'count_matches',
    'fill_text',
    'radio_selector',
    'read_attribute',
    'read_text',
    'read_toggle_state',
    'select_value',
    'set_file',
    'set_value_with_events',
    'wait_for_required_selector',
]
