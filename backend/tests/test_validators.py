import pytest

from utils.validators import generate_slug, is_bangladesh_phone, is_uuid, to_bool


@pytest.mark.parametrize('phone', [
    '01712345678',
    '+8801712345678',
    '8801912345678',
    '017 1234 5678',
    '01312345678',
])
def test_accepts_bangladeshi_mobile_numbers(phone):
    assert is_bangladesh_phone(phone)


@pytest.mark.parametrize('phone', [
    '',
    None,
    '0171234567',
    '017123456789',
    '01212345678',
    '02712345678',
    '+4401712345678',
    '01712-345678',
])
def test_rejects_other_numbers(phone):
    assert not is_bangladesh_phone(phone)


def test_generate_slug_collapses_separators():
    assert generate_slug('  Eid Offer -- 2025!! ') == 'eid-offer-2025'
    assert generate_slug('ঈদ') == ''


def test_is_uuid():
    assert is_uuid('0b6f8a3e-7a53-4e0f-9d7d-2f4c3b1a9e10')
    assert not is_uuid('custom-item-1')
    assert not is_uuid(42)


def test_to_bool():
    assert to_bool('on') is True
    assert to_bool('false') is False
    assert to_bool(None, default=True) is True
