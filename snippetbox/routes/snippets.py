"""
Snippetbox - Snippet Routes
===========================

What:  Viewing (public) and creating (login required) snippets.

Request Flow (POST /snippet/create):
    1. CSRF token and login already checked by the protected chain
    2. Decode the form (400 on undecodable values)
    3. Field checks; any failure re-renders the form with 422
    4. Insert, flash a confirmation, 303 to the new snippet's page
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from starlette.responses import HTMLResponse, RedirectResponse, Response

from snippetbox.application import RequestContext, get_application, get_context
from snippetbox.exceptions import NotFoundError
from snippetbox.forms import SnippetCreateForm
from snippetbox.middleware.chain import DYNAMIC_CHAIN, PROTECTED_CHAIN, chain_route
from snippetbox.routes.helpers import FLASH_KEY, decode_post_form, new_template_data, render

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/snippet", tags=["Snippets"], route_class=chain_route(DYNAMIC_CHAIN))
protected = APIRouter(
    prefix="/snippet", tags=["Snippets"], route_class=chain_route(PROTECTED_CHAIN)
)


@router.get("/view/{snippet_id}", response_class=HTMLResponse)
async def snippet_view(
    snippet_id: str,
    request: Request,
    ctx: RequestContext = Depends(get_context),
) -> HTMLResponse:
    """
    Show one snippet.

    Unparsable ids are answered exactly like missing or expired ones: 404.
    """
    try:
        parsed_id = UUID(snippet_id)
    except ValueError:
        raise NotFoundError(resource="snippet", resource_id=snippet_id)

    application = get_application(request)
    snippet = await application.snippets.get(parsed_id)

    data = new_template_data(ctx)
    data.snippet = snippet
    return render(application, "view.html", data)


@protected.get("/create", response_class=HTMLResponse)
async def snippet_create(
    request: Request, ctx: RequestContext = Depends(get_context)
) -> HTMLResponse:
    data = new_template_data(ctx)
    data.form = SnippetCreateForm()
    return render(get_application(request), "create.html", data)


@protected.post("/create")
async def snippet_create_post(
    request: Request, ctx: RequestContext = Depends(get_context)
) -> Response:
    application = get_application(request)
    form = await decode_post_form(request, SnippetCreateForm)

    if not form.validate_fields():
        data = new_template_data(ctx)
        data.form = form
        return render(application, "create.html", data, status=422)

    snippet_id = await application.snippets.insert(form.title, form.content, form.expires)

    ctx.session.put(FLASH_KEY, "Snippet successfully created!")
    return RedirectResponse(f"/snippet/view/{snippet_id}", status_code=303)
