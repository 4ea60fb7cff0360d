import logging

import dash
from dash import dcc, Output, Input, State, no_update
import dash_mantine_components as dmc
from pydantic import ValidationError

from api_connector import ApiError, get_api_client
from components import auth_card, error_alert, success_alert
from services.forms import ResetPasswordForm, form_errors

logger = logging.getLogger(__name__)

dash.register_page(__name__, path='/reset-password', name='Reset password', title='Reset password')


def layout(token=None, **kwargs):
    if not token:
        return auth_card(
            'Reset password',
            'This reset link is invalid or incomplete.',
            [dmc.Anchor('Request a new link', href='/forgot-password', ta='center')],
        )

    return auth_card(
        'Reset password',
        'Choose a new password',
        [
            dcc.Store(id='reset-token', data=token),
            dmc.PasswordInput(id='reset-password', label='New password'),
            dmc.PasswordInput(id='reset-confirm', label='Confirm new password'),
            dmc.Box(id='reset-alert'),
            dmc.Button('Reset password', id='reset-submit', fullWidth=True),
        ],
    )


@dash.callback(
    Output('reset-alert', 'children'),
    Output('reset-submit', 'disabled'),
    Input('reset-submit', 'n_clicks'),
    State('reset-token', 'data'),
    State('reset-password', 'value'),
    State('reset-confirm', 'value'),
    prevent_initial_call=True,
)
def submit_reset_password(n_clicks, reset_token, password, confirm_password):
    if not n_clicks:
        return no_update, no_update

    try:
        form = ResetPasswordForm(
            token=reset_token or '',
            password=password or '',
            confirm_password=confirm_password or '',
        )
    except ValidationError as e:
        return error_alert(form_errors(e), title='Check the form'), False

    try:
        get_api_client().reset_password(form.token, form.password)
    except ApiError as e:
        logger.warning(f"Password reset failed: {e.message}")
        return error_alert(e.message or 'Could not reset the password'), False

    logger.info("Password reset completed")
    return success_alert(
        ['Password reset. ', dmc.Anchor('Sign in', href='/login'), ' with your new password.'],
    ), True
