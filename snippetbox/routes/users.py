"""
Snippetbox - User Routes
========================

What:  Signup, login and logout.
How:   Login and logout both rotate the session token before changing the
       authenticated user id, so a token captured before login is useless
       afterwards.

Form error mapping:
    DuplicateEmailError      → field error on `email` (422)
    InvalidCredentialsError  → non-field error "Email or password is incorrect" (422)
"""

import logging

from fastapi import APIRouter, Depends, Request
from starlette.responses import HTMLResponse, RedirectResponse, Response

from snippetbox.application import RequestContext, get_application, get_context
from snippetbox.exceptions import DuplicateEmailError, InvalidCredentialsError
from snippetbox.forms import UserLoginForm, UserSignupForm
from snippetbox.middleware.auth import AUTH_SESSION_KEY, REDIRECT_AFTER_LOGIN_KEY
from snippetbox.middleware.chain import DYNAMIC_CHAIN, PROTECTED_CHAIN, chain_route
from snippetbox.routes.helpers import FLASH_KEY, decode_post_form, new_template_data, render

logger = logging.getLogger(__name__)

# Where login sends users who did not arrive from a protected page
DEFAULT_AFTER_LOGIN = "/snippet/create"

router = APIRouter(prefix="/user", tags=["Users"], route_class=chain_route(DYNAMIC_CHAIN))
protected = APIRouter(prefix="/user", tags=["Users"], route_class=chain_route(PROTECTED_CHAIN))


# ══════════════════════════════════════════════════════════════════════════
# Signup
# ══════════════════════════════════════════════════════════════════════════

@router.get("/signup", response_class=HTMLResponse)
async def user_signup(request: Request, ctx: RequestContext = Depends(get_context)) -> HTMLResponse:
    data = new_template_data(ctx)
    data.form = UserSignupForm()
    return render(get_application(request), "signup.html", data)


@router.post("/signup")
async def user_signup_post(request: Request, ctx: RequestContext = Depends(get_context)) -> Response:
    application = get_application(request)
    form = await decode_post_form(request, UserSignupForm)

    if form.validate_fields():
        try:
            await application.users.insert(form.name, form.email, form.password)
        except DuplicateEmailError:
            form.validator.add_field_error("email", "Email address is already in use")

    if not form.valid():
        data = new_template_data(ctx)
        data.form = form
        return render(application, "signup.html", data, status=422)

    ctx.session.put(FLASH_KEY, "Your signup was successful. Please log in.")
    return RedirectResponse("/user/login", status_code=303)


# ══════════════════════════════════════════════════════════════════════════
# Login / Logout
# ══════════════════════════════════════════════════════════════════════════

@router.get("/login", response_class=HTMLResponse)
async def user_login(request: Request, ctx: RequestContext = Depends(get_context)) -> HTMLResponse:
    data = new_template_data(ctx)
    data.form = UserLoginForm()
    return render(get_application(request), "login.html", data)


@router.post("/login")
async def user_login_post(request: Request, ctx: RequestContext = Depends(get_context)) -> Response:
    application = get_application(request)
    form = await decode_post_form(request, UserLoginForm)

    if form.validate_fields():
        try:
            user_id = await application.users.authenticate(form.email, form.password)
        except InvalidCredentialsError:
            form.validator.add_non_field_error("Email or password is incorrect")

    if not form.valid():
        data = new_template_data(ctx)
        data.form = form
        return render(application, "login.html", data, status=422)

    application.sessions.renew_token(ctx.session)
    ctx.session.put(AUTH_SESSION_KEY, str(user_id))
    logger.info("User %s logged in", user_id)

    redirect_to = ctx.session.pop(REDIRECT_AFTER_LOGIN_KEY, "") or DEFAULT_AFTER_LOGIN
    return RedirectResponse(redirect_to, status_code=303)


@protected.post("/logout")
async def user_logout_post(request: Request, ctx: RequestContext = Depends(get_context)) -> Response:
    application = get_application(request)

    application.sessions.renew_token(ctx.session)
    ctx.session.remove(AUTH_SESSION_KEY)
    ctx.session.put(FLASH_KEY, "You've been logged out successfully!")

    logger.info("User %s logged out", ctx.authenticated_user_id)
    return RedirectResponse("/", status_code=303)
