"""
Pure editing operations over a landing page's element list.

A page stores an ordered list of elements: legacy sections
``{id, type, order, settings}`` and rows ``{id, type: 'row', layout,
columns, settings, order}``. Every function returns new objects and leaves
its arguments untouched. After any structural change the ``order`` values
are rewritten to 1..N in list position, which is also the render order.
"""
import copy

from services import section_registry
from utils.exceptions import NotFoundError, PageLayoutError, UnknownSectionType, ValidationError

ROW_TYPE = 'row'


def resequence(elements):
    """Copy of elements with order = position, starting from 1"""
    result = []
    for position, element in enumerate(elements, start=1):
        element = dict(element)
        element['order'] = position
        result.append(element)
    return result


def assert_section_order(elements):
    orders = [element.get('order') for element in elements]
    expected = list(range(1, len(orders) + 1))
    if orders != expected:
        raise PageLayoutError(
            f"Section orders are not consecutive starting from 1: {orders}"
        )


def find_index(elements, element_id):
    for index, element in enumerate(elements):
        if element.get('id') == element_id:
            return index
    raise NotFoundError(f"Section {element_id} not found")


def get_element(elements, element_id):
    return elements[find_index(elements, element_id)]


def insert_element(elements, element, position=None):
    if position is not None and (isinstance(position, bool) or not isinstance(position, int)):
        raise ValidationError("Position must be an integer")
    result = list(elements)
    if position is None or position >= len(result):
        result.append(element)
    else:
        result.insert(max(position, 0), element)
    return resequence(result)


def add_section(elements, section_type, position=None):
    """Append (or insert at position) a new section with default settings"""
    section = section_registry.new_section(section_type)
    return insert_element(elements, section, position)


def replace_element(elements, element_id, replacement):
    """Swap one element for another in place, keeping its id and order"""
    index = find_index(elements, element_id)
    current = elements[index]
    replacement = copy.deepcopy(replacement)
    replacement['id'] = current['id']
    replacement['order'] = current.get('order', index + 1)
    result = list(elements)
    result[index] = replacement
    return result


def update_section(elements, section_id, replacement):
    """Replace a section wholesale; its kind cannot change"""
    current = get_element(elements, section_id)
    if current.get('type') == ROW_TYPE:
        raise ValidationError("Use the row endpoints to edit rows")
    section_type = replacement.get('type') or current['type']
    if section_type != current['type']:
        raise ValidationError("Section type cannot be changed")
    section = {
        'type': section_type,
        'settings': section_registry.normalize_settings(section_type, replacement.get('settings')),
    }
    return replace_element(elements, section_id, section)


def update_setting(section, key, value):
    """New section with one settings key replaced"""
    settings = dict(section.get('settings') or {})
    settings[key] = value
    updated = dict(section)
    updated['settings'] = settings
    return updated


def _list_field(section, field):
    kind = section_registry.get_kind(section.get('type'))
    if field not in kind.list_fields:
        raise ValidationError(f"'{field}' is not a list field of {kind.key}")
    return list((section.get('settings') or {}).get(field) or [])


def _check_index(items, index):
    if not isinstance(index, int) or not 0 <= index < len(items):
        raise ValidationError(f"Item index {index} out of range")


def append_item(section, field, item=None):
    """Append an item to an array setting (badges, FAQ items, ...)"""
    items = _list_field(section, field)
    if item is None:
        item = section_registry.get_kind(section['type']).new_item(field)
    items.append(copy.deepcopy(item))
    return update_setting(section, field, items)


def replace_item(section, field, index, item):
    items = _list_field(section, field)
    _check_index(items, index)
    merged = dict(items[index])
    merged.update(item or {})
    items[index] = merged
    return update_setting(section, field, items)


def remove_item(section, field, index):
    items = _list_field(section, field)
    _check_index(items, index)
    items = [existing for position, existing in enumerate(items) if position != index]
    return update_setting(section, field, items)


def delete_section(elements, section_id):
    """Remove exactly one element and close the gap in orders"""
    index = find_index(elements, section_id)
    return resequence(elements[:index] + elements[index + 1:])


def move_section(elements, section_id, direction):
    """
    Swap an element with its neighbour. Moving the first element up or the
    last one down leaves the list as it is.
    """
    if direction not in ('up', 'down'):
        raise ValidationError("Direction must be 'up' or 'down'")

    index = find_index(elements, section_id)
    target = index - 1 if direction == 'up' else index + 1
    result = list(elements)
    if 0 <= target < len(result):
        result[index], result[target] = result[target], result[index]
    return resequence(result)


def validate_elements(elements):
    """Checks run before a page's elements are saved"""
    from services import row_builder

    if not isinstance(elements, list):
        raise ValidationError("Sections must be a list")

    ids = set()
    for element in elements:
        if not isinstance(element, dict) or not element.get('id'):
            raise ValidationError("Every section needs an id")
        if element['id'] in ids:
            raise ValidationError(f"Duplicate section id: {element['id']}")
        ids.add(element['id'])

        if element.get('type') == ROW_TYPE:
            row_builder.assert_row_columns(element)
        elif not section_registry.is_section_type(element.get('type')):
            raise UnknownSectionType(f"Unknown section type: {element.get('type')}")

    assert_section_order(elements)
