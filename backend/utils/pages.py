from fastapi.responses import JSONResponse, RedirectResponse

from utils.serializers import serialize_user


def render_page(page: str, *, user: dict | None = None, status_code: int = 200, **context) -> JSONResponse:
    """
    Page descriptor for the front end: the page name plus its context.
    Markup lives in the front end, not here.
    """
    body = {"page": page, **context}
    if user is not None:
        body["user"] = serialize_user(user)
    return JSONResponse(body, status_code=status_code)


def redirect_to(location: str, *, after_post: bool = False) -> RedirectResponse:
    # 303 so browsers follow a form POST with a GET
    return RedirectResponse(location, status_code=303 if after_post else 302)
