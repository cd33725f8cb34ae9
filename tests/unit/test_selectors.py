import pytest

from smartcrawl.exploration.elements.models import ElementDescriptor, ElementKind
from smartcrawl.exploration.elements.selectors import (
    canonicalize, canonical_key, deduplicate, generate_id, synthesize_selector
)


def test_synthesize_is_deterministic():
    attributes = {'class': 'btn primary', 'name': 'save', 'aria-label': 'Save draft'}

    assert synthesize_selector(attributes, '/html[1]/body[1]/button[2]') == \
        synthesize_selector(attributes, '/html[1]/body[1]/button[2]')


@pytest.mark.parametrize('attributes, expected', [
    ({'data-testid': 'save', 'id': 'save-btn', 'name': 'save'}, 'data-testid=save'),
    ({'id': 'save-btn', 'aria-label': 'Save', 'name': 'save'}, 'id=save-btn'),
    ({'aria-label': 'Save', 'name': 'save'}, 'aria-label=Save'),
    ({'name': 'save', 'class': 'btn'}, 'name=save'),
    ({'id': '', 'name': 'save'}, 'name=save'),
])
def test_priority_attribute_wins(attributes, expected):
    assert synthesize_selector(attributes, '/html[1]') == expected


def test_separator_in_value_is_escaped():
    assert synthesize_selector({'id': 'a=b\\c'}) == 'id=a\\=b\\\\c'


def test_structural_fallback():
    assert synthesize_selector({'class': 'btn'}, '/html[1]/body[1]/div[3]/button[1]') == \
        'xpath=/html[1]/body[1]/div[3]/button[1]'
    assert synthesize_selector({}) == 'xpath=//*'


@pytest.mark.parametrize('selector', [
    'id=submit',
    '  ID =  submit  ',
    'aria-label=Save   draft\n',
    'xpath=/html[1]/ body[1] /button[1]',
    'data-testid=a\\=b',
    'button.primary  >  span',
    'name=',
    '',
])
def test_canonicalize_is_idempotent(selector):
    once = canonicalize(selector)

    assert canonicalize(once) == once


def test_canonicalize_ignores_whitespace_noise():
    assert canonicalize(' id = submit ') == canonicalize('id=submit') == 'id=submit'
    assert canonicalize('aria-label=Save  draft') == 'aria-label=Save draft'


def test_generate_id_is_stable_and_kind_sensitive():
    attributes = {'id': 'submit', 'class': 'btn'}

    first = generate_id('id=submit', ElementKind.BUTTON, attributes)

    assert first == generate_id('id=submit', 'button', {'class': 'other', 'id': 'submit'})
    assert first != generate_id('id=submit', ElementKind.LINK, attributes)
    assert len(first) == 16


def test_deduplicate_keeps_first_seen():
    first = ElementDescriptor('id=submit', ElementKind.BUTTON, {'id': 'submit'}, [], text='Submit')
    again = ElementDescriptor(' id = submit', ElementKind.BUTTON, {'id': 'submit', 'role': 'button'}, [])
    link = ElementDescriptor('id=submit', ElementKind.LINK, {'id': 'submit'}, [])

    unique = deduplicate([first, again, link])

    assert unique == [first, link]
    assert unique[0].text == 'Submit'
    assert first.key == canonical_key('id=submit', 'button', {'id': 'submit'})
