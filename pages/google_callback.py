import logging

import dash
from dash import dcc, Output, Input, no_update
import dash_mantine_components as dmc

from api_connector import ApiError, get_api_client
from components import error_alert

logger = logging.getLogger(__name__)

dash.register_page(__name__, path='/auth/google/callback', name='Google sign-in', title='Signing in')


def layout(code=None, **kwargs):
    return dmc.Center(
        dmc.Stack(
            [
                dcc.Store(id='google-code', data=code),
                dmc.Loader(),
                dmc.Text('Signing you in...', c='dimmed'),
                dmc.Box(id='google-alert'),
            ],
            align='center',
        ),
        py=60,
    )


@dash.callback(
    Output('auth-token', 'data', allow_duplicate=True),
    Output('google-alert', 'children'),
    Input('google-code', 'data'),
    prevent_initial_call='initial_duplicate',
)
def exchange_code(code):
    if not code:
        return no_update, error_alert(
            ['Google did not return an authorization code. ', dmc.Anchor('Back to sign in', href='/login')],
        )
    try:
        token = get_api_client().exchange_google_code(code)
    except ApiError as e:
        logger.warning(f"Google sign-in failed: {e.message}")
        return no_update, error_alert(
            [e.message, ' ', dmc.Anchor('Back to sign in', href='/login')],
            title='Google sign-in failed',
        )
    logger.info("User signed in with Google")
    return token, None
