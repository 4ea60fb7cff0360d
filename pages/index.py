import dash
import dash_mantine_components as dmc

from config import APP_TITLE

dash.register_page(__name__, path='/', name='Home', title=APP_TITLE)

layout = dmc.Container(
    dmc.Stack(
        [
            dmc.Title('Inventory control made simple', order=1),
            dmc.Text(
                'Keep categories, products and stock movements in one place, '
                'and see at a glance what needs restocking.',
                c='dimmed',
                size='lg',
            ),
            dmc.Group(
                [
                    dmc.Anchor(dmc.Button('Sign in', size='md'), href='/login', underline='never'),
                    dmc.Anchor(dmc.Button('Create account', size='md', variant='light'), href='/register', underline='never'),
                ],
                gap='md',
            ),
        ],
        gap='lg',
        py=80,
    ),
    size='md',
)
