import logging

import dash
from dash import Output, Input, State, no_update
import dash_mantine_components as dmc
from pydantic import ValidationError

from api_connector import ApiError, get_api_client
from components import auth_card, error_alert, success_alert
from services.forms import ForgotPasswordForm, form_errors

logger = logging.getLogger(__name__)

dash.register_page(__name__, path='/forgot-password', name='Forgot password', title='Recover password')

SUBMITTED_MESSAGE = (
    'If an account exists for this email, you will receive a link to reset your password.'
)


def layout(**kwargs):
    return auth_card(
        'Recover password',
        "Enter your email and we'll send you instructions to reset your password",
        [
            dmc.TextInput(id='forgot-email', label='Email', placeholder='you@example.com', type='email'),
            dmc.Box(id='forgot-alert'),
            dmc.Button('Send reset link', id='forgot-submit', fullWidth=True),
            dmc.Anchor('Back to sign in', href='/login', size='sm', ta='center'),
        ],
    )


@dash.callback(
    Output('forgot-alert', 'children'),
    Output('forgot-submit', 'disabled'),
    Input('forgot-submit', 'n_clicks'),
    State('forgot-email', 'value'),
    prevent_initial_call=True,
)
def submit_forgot_password(n_clicks, email):
    if not n_clicks:
        return no_update, no_update

    try:
        form = ForgotPasswordForm(email=email or '')
    except ValidationError as e:
        return error_alert(form_errors(e), title='Check the form'), False

    try:
        get_api_client().forgot_password(form.email)
    except ApiError as e:
        # Unknown addresses get the same answer as known ones
        if e.status_code == 404:
            return success_alert(SUBMITTED_MESSAGE), True
        logger.warning(f"Password recovery request failed: {e.message}")
        return error_alert(e.message, title='Could not send the reset link'), False

    return success_alert(SUBMITTED_MESSAGE), True
