"""
Cart forms. Work for both HTML posts and JSON bodies (Flask-WTF reads
``request.get_json()`` when there is no form data).
"""
import re

from flask import current_app
from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

_WHOLE_NUMBER = re.compile(r'^\s*[-+]?[0-9]+\s*$', re.ASCII)


class CartEditForm(FlaskForm):
    """New color/size/quantity for a cart line being edited."""

    color = StringField('Color', validators=[Optional(), Length(max=50)])
    size = StringField('Size', validators=[Optional(), Length(max=20)])
    # Raw on purpose: the selection state machine does the quantity parsing
    quantity = StringField('Quantity', validators=[Optional()])


class CartSelectionForm(CartEditForm):
    """A product selection to add to the cart."""

    product_id = IntegerField(
        'Product',
        validators=[DataRequired(message='Product is required')]
    )


class CartQuantityForm(FlaskForm):
    """Quantity change from the cart drawer; 0 removes the line."""

    quantity = StringField('Quantity')

    def validate_quantity(self, field):
        value = field.data
        if isinstance(value, bool):
            raise ValidationError('Quantity must be a whole number')
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and _WHOLE_NUMBER.match(value):
            number = int(value)
        else:
            raise ValidationError('Quantity must be a whole number')

        limit = current_app.config.get('MAX_LINE_QUANTITY', 99)
        if number > limit:
            raise ValidationError(f'Quantity cannot exceed {limit}')
        self.quantity_value = number
