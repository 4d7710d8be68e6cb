"""
Snippetbox - Account Routes
===========================

GET  /account/view             Profile of the logged-in user
GET  /account/password/update  Password change form
POST /account/password/update  Verify the current password, store the new one

All three run behind the login gate.
"""

from fastapi import APIRouter, Depends, Request
from starlette.responses import HTMLResponse, RedirectResponse, Response

from snippetbox.application import RequestContext, get_application, get_context
from snippetbox.exceptions import InvalidCredentialsError, NotFoundError
from snippetbox.forms import AccountPasswordUpdateForm
from snippetbox.middleware.chain import PROTECTED_CHAIN, chain_route
from snippetbox.routes.helpers import FLASH_KEY, decode_post_form, new_template_data, render

router = APIRouter(prefix="/account", tags=["Account"], route_class=chain_route(PROTECTED_CHAIN))


@router.get("/view", response_class=HTMLResponse)
async def account_view(request: Request, ctx: RequestContext = Depends(get_context)) -> Response:
    application = get_application(request)
    try:
        user = await application.users.get(ctx.authenticated_user_id)
    except NotFoundError:
        # Account removed between the authenticate check and now
        return RedirectResponse("/user/login", status_code=303)

    data = new_template_data(ctx)
    data.user = user
    return render(application, "account.html", data)


@router.get("/password/update", response_class=HTMLResponse)
async def account_password_update(
    request: Request, ctx: RequestContext = Depends(get_context)
) -> HTMLResponse:
    data = new_template_data(ctx)
    data.form = AccountPasswordUpdateForm()
    return render(get_application(request), "password.html", data)


@router.post("/password/update")
async def account_password_update_post(
    request: Request, ctx: RequestContext = Depends(get_context)
) -> Response:
    application = get_application(request)
    form = await decode_post_form(request, AccountPasswordUpdateForm)

    if form.validate_fields():
        try:
            await application.users.password_update(
                ctx.authenticated_user_id, form.current_password, form.new_password
            )
        except InvalidCredentialsError:
            form.validator.add_field_error("current_password", "Current password is incorrect")

    if not form.valid():
        data = new_template_data(ctx)
        data.form = form
        return render(application, "password.html", data, status=422)

    ctx.session.put(FLASH_KEY, "Your password has been updated!")
    return RedirectResponse("/account/view", status_code=303)
