import pytest

from services import row_builder, section_editor, section_registry
from utils.exceptions import NotFoundError, PageLayoutError, UnknownSectionType, ValidationError


def build_page(*types):
    elements = []
    for section_type in types:
        elements = section_editor.add_section(elements, section_type)
    return elements


def orders(elements):
    return [element['order'] for element in elements]


def kinds(elements):
    return [element['type'] for element in elements]


def test_new_sections_get_consecutive_orders():
    elements = build_page('hero-product', 'faq', 'checkout-form')

    assert orders(elements) == [1, 2, 3]
    assert kinds(elements) == ['hero-product', 'faq', 'checkout-form']
    section_editor.assert_section_order(elements)


def test_new_section_has_kind_defaults():
    section = build_page('countdown')[0]

    assert section['settings']['title'] == 'Offer Ends In'
    assert section['settings']['endDate'] == ''
    assert section['id']


def test_insert_at_position():
    elements = build_page('hero-product', 'faq')

    elements = section_editor.add_section(elements, 'spacer', position=1)

    assert kinds(elements) == ['hero-product', 'spacer', 'faq']
    assert orders(elements) == [1, 2, 3]


def test_unknown_section_type():
    with pytest.raises(UnknownSectionType):
        section_editor.add_section([], 'carousel-3d')


def test_move_swaps_neighbours_and_resequences():
    elements = build_page('hero-product', 'faq', 'checkout-form')
    faq_id = elements[1]['id']

    moved = section_editor.move_section(elements, faq_id, 'up')

    assert kinds(moved) == ['faq', 'hero-product', 'checkout-form']
    assert orders(moved) == [1, 2, 3]
    assert kinds(elements) == ['hero-product', 'faq', 'checkout-form']


@pytest.mark.parametrize('index, direction', [(0, 'up'), (2, 'down')])
def test_move_at_the_edges_is_a_no_op(index, direction):
    elements = build_page('hero-product', 'faq', 'checkout-form')

    moved = section_editor.move_section(elements, elements[index]['id'], direction)

    assert [e['id'] for e in moved] == [e['id'] for e in elements]
    assert orders(moved) == [1, 2, 3]


def test_move_rejects_bad_direction():
    elements = build_page('faq')
    with pytest.raises(ValidationError):
        section_editor.move_section(elements, elements[0]['id'], 'sideways')


def test_delete_removes_exactly_one_and_closes_gap():
    elements = build_page('hero-product', 'faq', 'checkout-form', 'spacer')

    remaining = section_editor.delete_section(elements, elements[1]['id'])

    assert kinds(remaining) == ['hero-product', 'checkout-form', 'spacer']
    assert orders(remaining) == [1, 2, 3]


def test_delete_unknown_section():
    with pytest.raises(NotFoundError):
        section_editor.delete_section(build_page('faq'), 'missing')


def test_assert_section_order_detects_gaps():
    elements = build_page('faq', 'spacer')
    elements[1] = dict(elements[1], order=5)

    with pytest.raises(PageLayoutError):
        section_editor.assert_section_order(elements)


def test_update_section_keeps_kind_and_normalizes():
    elements = build_page('image-gallery')
    section_id = elements[0]['id']

    updated = section_editor.update_section(elements, section_id, {
        'settings': {'images': 'https://cdn.test/a.jpg\n\n https://cdn.test/b.jpg ', 'columns': '4'},
    })

    settings = updated[0]['settings']
    assert settings['images'] == ['https://cdn.test/a.jpg', 'https://cdn.test/b.jpg']
    assert settings['columns'] == 4
    assert settings['aspectRatio'] == 'square'
    assert updated[0]['order'] == 1

    with pytest.raises(ValidationError):
        section_editor.update_section(elements, section_id, {'type': 'faq', 'settings': {}})


def test_list_field_items():
    section = build_page('faq')[0]

    section = section_editor.append_item(section, 'items')
    section = section_editor.append_item(section, 'items', {'question': 'Delivery time?', 'answer': '2-3 days'})
    section = section_editor.replace_item(section, 'items', 0, {'question': 'Cash on delivery?'})

    items = section['settings']['items']
    assert items[0] == {'question': 'Cash on delivery?', 'answer': ''}
    assert items[1]['answer'] == '2-3 days'

    section = section_editor.remove_item(section, 'items', 0)
    assert [item['question'] for item in section['settings']['items']] == ['Delivery time?']

    with pytest.raises(ValidationError):
        section_editor.remove_item(section, 'items', 3)
    with pytest.raises(ValidationError):
        section_editor.append_item(section, 'title')


def test_feature_badge_items_default_to_star_icon():
    section = section_editor.append_item(build_page('feature-badges')[0], 'badges')

    assert section['settings']['badges'] == [{'icon': 'Star', 'title': '', 'description': ''}]


def test_validate_elements():
    elements = build_page('faq', 'spacer')
    elements = section_editor.insert_element(elements, row_builder.create_default_row('50-50'))
    section_editor.validate_elements(elements)

    duplicate = elements + [dict(elements[0], order=4)]
    with pytest.raises(ValidationError):
        section_editor.validate_elements(duplicate)

    unknown = section_editor.resequence(elements + [{'id': 'x', 'type': 'marquee', 'settings': {}}])
    with pytest.raises(UnknownSectionType):
        section_editor.validate_elements(unknown)


def test_merge_theme():
    theme = section_registry.merge_theme({'primaryColor': '#111111', 'unknown': 'x'})

    assert theme['primaryColor'] == '#111111'
    assert theme['buttonStyle'] == 'filled'
    assert 'unknown' not in theme

    with pytest.raises(ValidationError):
        section_registry.merge_theme({'buttonStyle': 'neon'})
    assert section_registry.merge_theme({'buttonStyle': 'neon'}, strict=False)['buttonStyle'] == 'filled'


def test_builder_catalog_lists_every_kind():
    keys = [kind['type'] for kind in section_registry.builder_catalog()]

    assert len(keys) == 14
    assert 'checkout-form' in keys and 'countdown' in keys
