"""
Snippetbox - Form Payloads
==========================

What:  Pydantic models for every HTML form the site accepts.
How:   `decode_post_form()` (routes/helpers.py) validates the raw form body
       into one of these models; decoding failures are 400s. Each form then
       runs its own field checks into its `validator` field; a form with
       errors is re-rendered with status 422.
Who:   Route handlers and the page templates (which read both the submitted
       values and `form.validator.field_errors`).

Each form holds its Validator as a named field rather than inheriting from
it, so templates and handlers always go through `form.validator`.
"""

from pydantic import BaseModel, ConfigDict, Field

from snippetbox import validator as v
from snippetbox.validator import Validator

# Minimum length for new passwords
PASSWORD_MIN_CHARS = 8

# Allowed snippet lifetimes in days
PERMITTED_EXPIRES = (1, 7, 365)


class FormModel(BaseModel):
    """Shared configuration: the validator never comes from the request body."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    validator: Validator = Field(default_factory=Validator, exclude=True)

    def valid(self) -> bool:
        return self.validator.valid()


class SnippetCreateForm(FormModel):
    title: str = ""
    content: str = ""
    expires: int = 365

    def validate_fields(self) -> bool:
        check = self.validator.check_field
        check(v.not_blank(self.title), "title", "This field cannot be blank")
        check(v.max_chars(self.title, 100), "title", "This field cannot be more than 100 characters long")
        check(v.not_blank(self.content), "content", "This field cannot be blank")
        check(
            v.permitted_value(self.expires, *PERMITTED_EXPIRES),
            "expires",
            "This field must equal 1, 7 or 365",
        )
        return self.valid()


class UserSignupForm(FormModel):
    name: str = ""
    email: str = ""
    password: str = ""

    def validate_fields(self) -> bool:
        check = self.validator.check_field
        check(v.not_blank(self.name), "name", "This field cannot be blank")
        check(v.not_blank(self.email), "email", "This field cannot be blank")
        check(v.matches(self.email, v.EMAIL_RX), "email", "This field must be a valid email address")
        check(v.not_blank(self.password), "password", "This field cannot be blank")
        check(
            v.min_chars(self.password, PASSWORD_MIN_CHARS),
            "password",
            f"This field must be at least {PASSWORD_MIN_CHARS} characters long",
        )
        return self.valid()


class UserLoginForm(FormModel):
    email: str = ""
    password: str = ""

    def validate_fields(self) -> bool:
        check = self.validator.check_field
        check(v.not_blank(self.email), "email", "This field cannot be blank")
        check(v.matches(self.email, v.EMAIL_RX), "email", "This field must be a valid email address")
        check(v.not_blank(self.password), "password", "This field cannot be blank")
        return self.valid()


class AccountPasswordUpdateForm(FormModel):
    current_password: str = ""
    new_password: str = ""
    new_password_confirmation: str = ""

    def validate_fields(self) -> bool:
        check = self.validator.check_field
        check(v.not_blank(self.current_password), "current_password", "This field cannot be blank")
        check(v.not_blank(self.new_password), "new_password", "This field cannot be blank")
        check(
            v.min_chars(self.new_password, PASSWORD_MIN_CHARS),
            "new_password",
            f"This field must be at least {PASSWORD_MIN_CHARS} characters long",
        )
        check(
            v.not_blank(self.new_password_confirmation),
            "new_password_confirmation",
            "This field cannot be blank",
        )
        check(
            self.new_password == self.new_password_confirmation,
            "new_password_confirmation",
            "Passwords do not match",
        )
        return self.valid()
