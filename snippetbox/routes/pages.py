"""
Snippetbox - Static Pages
=========================

GET /       Home page listing the latest unexpired snippets
GET /about  About page
"""

from fastapi import APIRouter, Depends, Request
from starlette.responses import HTMLResponse

from snippetbox.application import RequestContext, get_application, get_context
from snippetbox.middleware.chain import DYNAMIC_CHAIN, chain_route
from snippetbox.routes.helpers import new_template_data, render

router = APIRouter(tags=["Pages"], route_class=chain_route(DYNAMIC_CHAIN))


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, ctx: RequestContext = Depends(get_context)) -> HTMLResponse:
    application = get_application(request)
    snippets = await application.snippets.latest()

    data = new_template_data(ctx)
    data.snippets = snippets
    return render(application, "home.html", data)


@router.get("/about", response_class=HTMLResponse)
async def about(request: Request, ctx: RequestContext = Depends(get_context)) -> HTMLResponse:
    return render(get_application(request), "about.html", new_template_data(ctx))
