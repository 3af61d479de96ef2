"""Form for registering and editing apps."""

from typing import Any, Dict

from wtforms import Form, StringField, TextAreaField
from wtforms.validators import URL, DataRequired, Length

from . import domain


class AppForm(Form):
    """App registration and edit form."""

    name = StringField('Name', validators=[DataRequired(), Length(max=255)])
    description = TextAreaField('Description', validators=[Length(max=2000)])
    website = StringField('Website', validators=[Length(max=255)])
    callback_url = StringField('Callback URL', validators=[Length(max=255)])

    def validate_website(self, field: StringField) -> None:
        """The website is optional, but must be a URL if provided."""
        if field.data:
            URL(message='Must be a valid URL')(self, field)

    def validate_callback_url(self, field: StringField) -> None:
        """The callback URL is optional, but must be a URL if provided."""
        if field.data:
            URL(message='Must be a valid URL')(self, field)

    @classmethod
    def new(cls) -> 'AppForm':
        """Generate a blank form for registering a new app."""
        return cls(data={'name': '', 'description': '', 'website': '',
                         'callback_url': ''})

    @classmethod
    def from_domain(cls, app: domain.App) -> 'AppForm':
        """Instantiate a pre-filled form from an existing app."""
        return cls(data={'name': app.name,
                         'description': app.description,
                         'website': app.website,
                         'callback_url': app.callback_url})

    def to_dict(self) -> Dict[str, Any]:
        """Get the cleaned, mutable app fields from the form."""
        return {
            'name': (self.name.data or '').strip(),
            'description': (self.description.data or '').strip(),
            'website': (self.website.data or '').strip(),
            'callback_url': (self.callback_url.data or '').strip()
        }
