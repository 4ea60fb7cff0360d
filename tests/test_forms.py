"""
Tests for form validation and API payloads.
"""
from pathlib import Path

import pytest
from pydantic import ValidationError

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.forms import (
    CategoryForm,
    ForgotPasswordForm,
    LoginForm,
    MovementForm,
    ProductForm,
    RegisterForm,
    ResetPasswordForm,
    form_errors,
)


def _errors(model, **values):
    with pytest.raises(ValidationError) as excinfo:
        model(**values)
    return form_errors(excinfo.value)


def test_login_form_strips_email():
    form = LoginForm(email='  user@example.com ', password='secret')
    assert form.email == 'user@example.com'


def test_login_form_rejects_bad_email_and_empty_password():
    messages = _errors(LoginForm, email='nope', password='')
    assert 'Email: Enter a valid email address' in messages
    assert any(message.startswith('Password:') for message in messages)


def test_forgot_password_form():
    assert ForgotPasswordForm(email='a@b.c').email == 'a@b.c'
    assert _errors(ForgotPasswordForm, email='@b.c') == ['Email: Enter a valid email address']


def test_register_form_password_rules():
    form = RegisterForm(email='a@b.c', password='secret', confirm_password='secret', invite_code=' INV ')
    assert form.invite_code == 'INV'

    assert _errors(
        RegisterForm, email='a@b.c', password='secret', confirm_password='secrets', invite_code='INV'
    ) == ['Passwords do not match']

    messages = _errors(RegisterForm, email='a@b.c', password='abc', confirm_password='abc', invite_code='INV')
    assert len(messages) == 1
    assert messages[0].startswith('Password:')


def test_register_form_requires_invite_code():
    messages = _errors(RegisterForm, email='a@b.c', password='secret', confirm_password='secret', invite_code='   ')
    assert messages == ['Invite code: Invite code is required']


def test_reset_password_form():
    assert ResetPasswordForm(token='t', password='secret', confirm_password='secret').password == 'secret'
    assert _errors(ResetPasswordForm, token='t', password='abc', confirm_password='abd') == ['Passwords do not match']
    assert _errors(ResetPasswordForm, token='t', password='abc', confirm_password='abc') == [
        'Password must be at least 6 characters'
    ]


def test_category_form_payload():
    form = CategoryForm(name='  Drinks ', description=None)
    assert form.to_payload() == {'name': 'Drinks', 'description': ''}
    assert _errors(CategoryForm, name='   ')[0].startswith('Name:')


def test_product_form_payload():
    form = ProductForm(name='Coffee', sku=None, category_id=3, price=19.9, min_stock=5, initial_stock=None)
    assert form.initial_stock == 0
    assert form.to_payload() == {
        'name': 'Coffee',
        'sku': '',
        'price': 19.9,
        'minStock': 5,
        'categoryId': '3',
    }


def test_product_form_rejects_negative_numbers():
    messages = _errors(ProductForm, name='Coffee', price=-1, min_stock=-2, initial_stock=-3)
    assert {message.split(':')[0] for message in messages} == {'Price', 'Minimum stock', 'Initial stock'}


def test_movement_form():
    form = MovementForm(product_id=7, type='OUT', quantity=2, notes=' sold ')
    assert form.to_payload() == {'product_id': '7', 'type': 'OUT', 'quantity': 2, 'notes': 'sold'}


@pytest.mark.parametrize('values,field', [
    ({'product_id': None, 'type': 'IN', 'quantity': 1}, 'Product'),
    ({'product_id': 1, 'type': 'MOVE', 'quantity': 1}, 'Type'),
    ({'product_id': 1, 'type': 'IN', 'quantity': 0}, 'Quantity'),
])
def test_movement_form_errors(values, field):
    messages = _errors(MovementForm, **values)
    assert messages[0].startswith(f'{field}:')
