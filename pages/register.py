import logging

import dash
from dash import Output, Input, State, no_update
import dash_mantine_components as dmc
from pydantic import ValidationError

from api_connector import ApiError, get_api_client
from components import auth_card, error_alert, success_alert
from services.forms import RegisterForm, form_errors

logger = logging.getLogger(__name__)

dash.register_page(__name__, path='/register', name='Register', title='Create account')


def layout(**kwargs):
    return auth_card(
        'Create account',
        'Registration requires an invite code',
        [
            dmc.TextInput(id='register-email', label='Email', placeholder='you@example.com', type='email'),
            dmc.PasswordInput(id='register-password', label='Password'),
            dmc.PasswordInput(id='register-confirm', label='Confirm password'),
            dmc.TextInput(id='register-invite', label='Invite code'),
            dmc.Box(id='register-alert'),
            dmc.Button('Create account', id='register-submit', fullWidth=True),
            dmc.Text(
                ['Already have an account? ', dmc.Anchor('Sign in', href='/login')],
                size='sm',
                ta='center',
            ),
        ],
    )


@dash.callback(
    Output('register-alert', 'children'),
    Input('register-submit', 'n_clicks'),
    State('register-email', 'value'),
    State('register-password', 'value'),
    State('register-confirm', 'value'),
    State('register-invite', 'value'),
    prevent_initial_call=True,
)
def submit_register(n_clicks, email, password, confirm_password, invite_code):
    if not n_clicks:
        return no_update

    try:
        form = RegisterForm(
            email=email or '',
            password=password or '',
            confirm_password=confirm_password or '',
            invite_code=invite_code or '',
        )
    except ValidationError as e:
        return error_alert(form_errors(e), title='Check the form')

    try:
        get_api_client().register(form.email, form.password, form.invite_code)
    except ApiError as e:
        logger.warning(f"Registration failed for {form.email}: {e.message}")
        return error_alert(e.message, title='Could not create the account')

    logger.info(f"Registered {form.email}")
    return success_alert(
        ['Account created. ', dmc.Anchor('Sign in', href='/login'), ' to continue.'],
    )
