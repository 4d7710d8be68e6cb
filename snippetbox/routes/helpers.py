"""
Snippetbox - Handler Helpers
============================

Shared plumbing for the page handlers: form decoding, template data and
rendering.
"""

import logging
from typing import Type, TypeVar

from fastapi import Request
from pydantic import ValidationError
from starlette.responses import HTMLResponse

from snippetbox.application import Application, RequestContext
from snippetbox.exceptions import BadRequestError
from snippetbox.forms import FormModel
from snippetbox.templates import TemplateData
from snippetbox.timeutil import utcnow

logger = logging.getLogger(__name__)

FLASH_KEY = "flash"

F = TypeVar("F", bound=FormModel)


async def decode_post_form(request: Request, form_cls: Type[F]) -> F:
    """
    Decode the submitted form body into `form_cls`.

    Only the model's declared fields are read; the validator always starts
    empty.

    Raises:
        BadRequestError: The body could not be parsed or a value has the
                         wrong type (e.g. a non-numeric `expires`).
    """
    form = await request.form()
    values = {
        name: form.get(name)
        for name in form_cls.model_fields
        if name != "validator" and name in form
    }
    try:
        return form_cls.model_validate(values)
    except ValidationError as e:
        logger.info("Undecodable %s: %d error(s)", form_cls.__name__, e.error_count())
        raise BadRequestError(
            message="could not decode form",
            context={"form": form_cls.__name__},
        ) from e


def new_template_data(ctx: RequestContext) -> TemplateData:
    """Template data common to every page. Consumes the pending flash message."""
    return TemplateData(
        current_year=utcnow().year,
        flash=ctx.session.pop(FLASH_KEY, ""),
        is_authenticated=ctx.is_authenticated,
        csrf_token=ctx.csrf_token,
    )


def render(
    application: Application, page: str, data: TemplateData, status: int = 200
) -> HTMLResponse:
    # Rendered to a string first so a template error never sends a partial page
    body = application.templates.render(page, data)
    return HTMLResponse(body, status_code=status)
