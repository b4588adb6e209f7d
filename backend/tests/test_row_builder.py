import pytest

from services import row_builder
from utils.exceptions import NotFoundError, PageLayoutError, ValidationError


def test_default_row_has_one_column_per_width():
    row = row_builder.create_default_row('25-50-25')

    assert row['type'] == 'row'
    assert len(row['columns']) == 3
    assert row['settings']['maxWidth'] == 'boxed'
    row_builder.assert_row_columns(row)


def test_unknown_layout():
    with pytest.raises(ValidationError):
        row_builder.create_default_row('10-90')


def test_column_count_must_match_layout():
    row = row_builder.create_default_row('50-50')
    row['layout'] = '33-33-33'

    with pytest.raises(PageLayoutError):
        row_builder.assert_row_columns(row)


def test_shrinking_layout_moves_widgets_into_last_kept_column():
    row = row_builder.create_default_row('33-33-33')
    row = row_builder.add_widget(row, 0, 'heading')
    row = row_builder.add_widget(row, 1, 'text')
    row = row_builder.add_widget(row, 2, 'button')

    changed = row_builder.change_row_layout(row, '100')

    assert changed['layout'] == '100'
    assert len(changed['columns']) == 1
    assert [w['type'] for w in changed['columns'][0]['widgets']] == ['heading', 'text', 'button']
    assert len(row['columns']) == 3


def test_growing_layout_adds_empty_columns():
    row = row_builder.add_widget(row_builder.create_default_row('100'), 0, 'image')

    changed = row_builder.change_row_layout(row, '25-25-25-25')

    assert len(changed['columns']) == 4
    assert [len(c['widgets']) for c in changed['columns']] == [1, 0, 0, 0]
    row_builder.assert_row_columns(changed)


def test_widget_editing():
    row = row_builder.create_default_row('50-50')
    row = row_builder.add_widget(row, 1, 'counter')
    row = row_builder.add_widget(row, 1, 'spacer')
    counter_id = row['columns'][1]['widgets'][0]['id']

    row = row_builder.update_widget(row, counter_id, {'number': '500'})
    counter = row['columns'][1]['widgets'][0]
    assert counter['settings']['number'] == '500'
    assert counter['settings']['suffix'] == '+'

    row = row_builder.move_widget(row, counter_id, 'down')
    assert [w['type'] for w in row['columns'][1]['widgets']] == ['spacer', 'counter']

    row = row_builder.remove_widget(row, counter_id)
    assert [w['type'] for w in row['columns'][1]['widgets']] == ['spacer']

    with pytest.raises(NotFoundError):
        row_builder.remove_widget(row, counter_id)


def test_add_widget_checks_type_and_column():
    row = row_builder.create_default_row('100')

    with pytest.raises(ValidationError):
        row_builder.add_widget(row, 0, 'carousel')
    with pytest.raises(ValidationError):
        row_builder.add_widget(row, 1, 'text')


def test_row_settings_merge():
    row = row_builder.update_row_settings(row_builder.create_default_row(), {'backgroundColor': '#fef3c7'})

    assert row['settings']['backgroundColor'] == '#fef3c7'
    assert row['settings']['padding'] == '24px 16px'


def test_layout_catalog():
    catalog = row_builder.layout_catalog()

    assert len(catalog['layouts']) == 9
    assert len(catalog['widgets']) == 17
