"""Validation of user input before it is sent to the API."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

MIN_PASSWORD_LENGTH = 6


def _clean_email(value: str) -> str:
    value = (value or '').strip()
    if '@' not in value or value.startswith('@') or value.endswith('@'):
        raise ValueError('Enter a valid email address')
    return value


class LoginForm(BaseModel):
    email: str
    password: str = Field(min_length=1)

    @field_validator('email')
    @classmethod
    def _email(cls, value):
        return _clean_email(value)


class ForgotPasswordForm(BaseModel):
    email: str

    @field_validator('email')
    @classmethod
    def _email(cls, value):
        return _clean_email(value)


class RegisterForm(BaseModel):
    email: str
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    confirm_password: str
    invite_code: str = Field(min_length=1)

    @field_validator('email')
    @classmethod
    def _email(cls, value):
        return _clean_email(value)

    @field_validator('invite_code')
    @classmethod
    def _invite_code(cls, value):
        value = value.strip()
        if not value:
            raise ValueError('Invite code is required')
        return value

    @model_validator(mode='after')
    def _passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError('Passwords do not match')
        return self


class ResetPasswordForm(BaseModel):
    token: str = Field(min_length=1)
    password: str
    confirm_password: str

    @model_validator(mode='after')
    def _passwords(self):
        if self.password != self.confirm_password:
            raise ValueError('Passwords do not match')
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        return self


class CategoryForm(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = ''

    @field_validator('name', 'description', mode='before')
    @classmethod
    def _strip(cls, value):
        return (value or '').strip()

    def to_payload(self):
        return {'name': self.name, 'description': self.description}


class ProductForm(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    sku: str = ''
    category_id: Optional[str] = None
    price: float = Field(ge=0)
    min_stock: int = Field(ge=0)
    initial_stock: int = Field(default=0, ge=0)

    @field_validator('name', 'sku', mode='before')
    @classmethod
    def _strip(cls, value):
        return (value or '').strip()

    @field_validator('category_id', mode='before')
    @classmethod
    def _category(cls, value):
        if value in (None, ''):
            return None
        return str(value)

    @field_validator('initial_stock', mode='before')
    @classmethod
    def _initial_stock(cls, value):
        return 0 if value in (None, '') else value

    def to_payload(self):
        return {
            'name': self.name,
            'sku': self.sku,
            'price': self.price,
            'minStock': self.min_stock,
            'categoryId': self.category_id,
        }


class MovementForm(BaseModel):
    product_id: str = Field(min_length=1)
    type: Literal['IN', 'OUT']
    quantity: int = Field(gt=0)
    notes: str = ''

    @field_validator('product_id', mode='before')
    @classmethod
    def _product(cls, value):
        return '' if value is None else str(value)

    @field_validator('notes', mode='before')
    @classmethod
    def _notes(cls, value):
        return (value or '').strip()

    def to_payload(self):
        return {
            'product_id': self.product_id,
            'type': self.type,
            'quantity': self.quantity,
            'notes': self.notes,
        }


_FIELD_LABELS = {
    'email': 'Email',
    'password': 'Password',
    'confirm_password': 'Confirm password',
    'invite_code': 'Invite code',
    'token': 'Reset link',
    'name': 'Name',
    'sku': 'SKU',
    'category_id': 'Category',
    'price': 'Price',
    'min_stock': 'Minimum stock',
    'initial_stock': 'Initial stock',
    'product_id': 'Product',
    'type': 'Type',
    'quantity': 'Quantity',
    'notes': 'Notes',
}


def form_errors(exc: ValidationError) -> List[str]:
    """Flatten a ValidationError into one readable line per problem."""
    messages = []
    for error in exc.errors():
        message = error.get('msg', 'Invalid value')
        if message.startswith('Value error, '):
            message = message[len('Value error, '):]
        loc = [str(part) for part in error.get('loc', ())]
        if loc:
            label = _FIELD_LABELS.get(loc[0], loc[0])
            message = f'{label}: {message}'
        messages.append(message)
    return messages
