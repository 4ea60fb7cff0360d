import logging

import dash
from dash import Output, Input, State, no_update
import dash_mantine_components as dmc
from pydantic import ValidationError

from api_connector import ApiError, get_api_client
from components import auth_card, error_alert
from services.forms import LoginForm, form_errors

logger = logging.getLogger(__name__)

dash.register_page(__name__, path='/login', name='Login', title='Sign in')


def layout(**kwargs):
    return auth_card(
        'Welcome back',
        'Sign in to access your account',
        [
            dmc.TextInput(id='login-email', label='Email', placeholder='you@example.com', type='email'),
            dmc.PasswordInput(id='login-password', label='Password'),
            dmc.Group(
                dmc.Anchor('Forgot your password?', href='/forgot-password', size='sm'),
                justify='flex-end',
            ),
            dmc.Box(id='login-alert'),
            dmc.Button('Sign in', id='login-submit', fullWidth=True),
            dmc.Divider(label='or', labelPosition='center'),
            dmc.Anchor(
                dmc.Button('Continue with Google', variant='default', fullWidth=True),
                href=get_api_client().google_login_url(),
                underline='never',
            ),
            dmc.Text(
                ['No account yet? ', dmc.Anchor('Register here', href='/register')],
                size='sm',
                ta='center',
            ),
        ],
    )


@dash.callback(
    Output('auth-token', 'data'),
    Output('login-alert', 'children'),
    Input('login-submit', 'n_clicks'),
    State('login-email', 'value'),
    State('login-password', 'value'),
    prevent_initial_call=True,
)
def submit_login(n_clicks, email, password):
    if not n_clicks:
        return no_update, no_update

    try:
        form = LoginForm(email=email or '', password=password or '')
    except ValidationError as e:
        return no_update, error_alert(form_errors(e), title='Check the form')

    try:
        token = get_api_client().login(form.email, form.password)
    except ApiError as e:
        logger.warning(f"Login failed for {form.email}: {e.message}")
        return no_update, error_alert(e.message, title='Could not sign in')

    logger.info(f"User {form.email} signed in")
    return token, None
