"""
regserver/api/pages.py

Purpose: Browser-facing HTML pages

- Home page and registration form
- Form submission endpoint (registers a user)
- Listing of registered users (name, email, username only)
- Error page used by the exception handlers for HTML clients
"""

from html import escape
from typing import List

from fastapi import APIRouter, Depends, Form
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse
from pydantic import ValidationError as PydanticValidationError

from regserver.api.deps import get_registration_service
from regserver.core.logging import get_logger
from regserver.models.user import UserCreate, UserPublic
from regserver.services.registration_service import RegistrationService

logger = get_logger(__name__)
router = APIRouter()


STYLE = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #f7fafc;
            color: #2d3748;
            display: flex;
            justify-content: center;
            padding: 40px 20px;
        }
        .container {
            background: white;
            border-radius: 12px;
            box-shadow: 0 10px 30px rgba(0, 0, 0, 0.1);
            padding: 30px;
            max-width: 640px;
            width: 100%;
        }
        label { display: block; margin-top: 12px; font-weight: 600; }
        input { width: 100%; padding: 8px; margin-top: 4px; box-sizing: border-box; }
        button { margin-top: 20px; padding: 10px 20px; }
        table { width: 100%; border-collapse: collapse; }
        th, td { text-align: left; padding: 8px; border-bottom: 1px solid #e2e8f0; }
        .error { color: #c53030; }
"""


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <style>{STYLE}</style>
</head>
<body>
    <div class="container">
{body}
    </div>
</body>
</html>
"""


def render_home_page() -> str:
    return _page("Registration", """
        <h1>User registration</h1>
        <ul>
            <li><a href="/form">Register a new user</a></li>
            <li><a href="/registered-users">See registered users</a></li>
        </ul>""")


def render_form_page() -> str:
    return _page("Register", """
        <h1>Register</h1>
        <form action="/register" method="post">
            <label for="name">Name</label>
            <input id="name" name="name" type="text" required>
            <label for="username">Username</label>
            <input id="username" name="username" type="text" required>
            <label for="email">Email</label>
            <input id="email" name="email" type="email" required>
            <label for="password">Password</label>
            <input id="password" name="password" type="password" required>
            <button type="submit">Register</button>
        </form>""")


def render_users_page(users: List[UserPublic]) -> str:
    if not users:
        rows = '            <tr><td colspan="3">No users registered yet.</td></tr>'
    else:
        rows = "\n".join(
            f"            <tr><td>{escape(u.name)}</td><td>{escape(u.email)}</td><td>{escape(u.username)}</td></tr>"
            for u in users
        )

    return _page("Registered users", f"""
        <h1>Registered users</h1>
        <table>
            <tr><th>Name</th><th>Email</th><th>Username</th></tr>
{rows}
        </table>
        <p><a href="/form">Register another user</a></p>""")


def render_error_page(message: str, status_code: int) -> str:
    return _page("Error", f"""
        <h1 class="error">Something went wrong ({status_code})</h1>
        <p>{escape(message)}</p>
        <p><a href="/form">Back to the form</a></p>""")


@router.get("/", response_class=HTMLResponse)
async def home_page():
    return HTMLResponse(content=render_home_page())


@router.get("/form", response_class=HTMLResponse)
async def registration_form():
    return HTMLResponse(content=render_form_page())


@router.post("/register", response_class=HTMLResponse, status_code=201)
async def register_from_form(
    name: str = Form(...),
    username: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Registers a user from the HTML form.

    Returns 201 with a plain success message; failures are rendered by
    the exception handlers (409 duplicate, 422 invalid form, 500 store).
    """
    try:
        candidate = UserCreate(name=name, username=username, email=email, password=password)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors()) from e

    await service.register(candidate)
    return HTMLResponse(content="User created successfully", status_code=201)


@router.get("/registered-users", response_class=HTMLResponse)
async def list_registered_users(
    service: RegistrationService = Depends(get_registration_service),
):
    users = await service.list_all()
    return HTMLResponse(content=render_users_page(users))
