import os

import dash
from dash import dcc, html, Input, Output, State, callback

import dash_bootstrap_components as dbc
import dash.exceptions

import dash_ag_grid as dag

import logging

import converter
from errors import ConversionError
from unit_registry import registry

logger = logging.getLogger(__name__)

# Initialize the Dash app
app = dash.Dash(__name__, external_stylesheets=[dbc.themes.SANDSTONE])
app.title = "Unit Converter"

# Expose server for deployment platforms (Railway, Heroku, etc.)
server = app.server

# Grouped options for both unit dropdowns
dropdown_options = registry.dropdown_options()

full_width_class = "d-flex w-100 justify-content-center"


def unit_caption(unit):
    """Return the caption shown under the result: the target unit, or "Unit" when none is selected."""
    return unit if unit else "Unit"


def add_unit_dropdown(label, dropdown_id):
    """
    Create a labeled dropdown listing every unit, grouped by category.

    Parameters:
        label (str): Text shown above the dropdown ("From" or "To").
        dropdown_id (str): Component id of the dcc.Dropdown.

    Returns:
        html.Div: A container holding the label and the dropdown.
    """
    return html.Div(
        [
            dbc.Label(
                label,
                className="text-primary fs-5",
                html_for=dropdown_id,
            ),
            dcc.Dropdown(
                id=dropdown_id,
                options=dropdown_options,
                value=None,
                placeholder="Select unit",
                style={"width": "100%"},
                maxHeight=300,
            ),
        ],
        className="mb-3",
    )


def add_value_input():
    return html.Div(
        [
            dbc.Label(
                "Value",
                className="text-primary fs-5",
                html_for="input-value",
            ),
            dcc.Input(
                id="input-value",
                type="text",
                inputMode="decimal",
                placeholder="Enter value",
                value="",
                style={"width": "100%"},
            ),
        ],
        className="mb-3",
    )


def add_result_display():
    """
    Create the result display: the converted value in large type above the target unit caption.
    """
    return html.Div(
        [
            html.Div(
                converter.format_result(None),
                id="converted-value",
                className="text-primary fs-1 fw-bold",
            ),
            html.Div(
                unit_caption(None),
                id="converted-unit",
                className="text-muted",
            ),
        ],
        className="mt-4 text-center",
    )


def add_conversion_grid():
    return dag.AgGrid(
        rowData=[],
        columnDefs=[
            {"field": "unit", "headerName": "Unit"},
            {"field": "symbol", "headerName": "Symbol"},
            {
                "field": "value",
                "headerName": "Value",
                "valueFormatter": {"function": "d3.format(',.4~f')(params.value)"},
            },
        ],
        columnSize="sizeToFit",
        dashGridOptions={"domLayout": "autoHeight"},
        style={"width": "100%"},
        id="conversion-grid",
        className="mt-4 ag-theme-alpine",
    )


# App layout
app.layout = dbc.Container(
    [
        dbc.Row(
            dbc.Col(
                dbc.Card(
                    dbc.CardBody(
                        [
                            html.H1(
                                "Unit Converter",
                                className="text-primary fs-2 text-center",
                            ),
                            html.P(
                                "Convert values between different units.",
                                className="text-muted text-center mb-4",
                            ),
                            dbc.Row(
                                [
                                    dbc.Col(add_unit_dropdown("From", "input-unit"), md=6),
                                    dbc.Col(add_unit_dropdown("To", "output-unit"), md=6),
                                ]
                            ),
                            add_value_input(),
                            dbc.Button(
                                "Convert",
                                id="convert-button",
                                color="primary",
                                n_clicks=0,
                                className="w-100",
                            ),
                            dbc.Alert(
                                "",
                                id="conversion-alert",
                                color="danger",
                                is_open=False,
                                dismissable=True,
                                className="mt-3",
                            ),
                            add_result_display(),
                            add_conversion_grid(),
                        ]
                    ),
                    className="border-primary shadow",
                ),
                md=6,
                lg=5,
            ),
            className=full_width_class,
        ),
    ],
    className="mt-5",
    fluid=True,
)


##################################################################
# Convert the entered value when the Convert button is pressed
@callback(
    Output(component_id="converted-value", component_property="children"),
    Output(component_id="converted-unit", component_property="children"),
    Output(component_id="conversion-alert", component_property="children"),
    Output(component_id="conversion-alert", component_property="is_open"),
    Output(component_id="conversion-grid", component_property="rowData"),
    Input(component_id="convert-button", component_property="n_clicks"),
    State(component_id="input-value", component_property="value"),
    State(component_id="input-unit", component_property="value"),
    State(component_id="output-unit", component_property="value"),
)
def convert_value(n_clicks, raw_value, from_unit, to_unit):
    """
    Convert the entered value and refresh the result display, the alert and the conversion table.

    Parameters:
        n_clicks (int | None): Number of times the Convert button was pressed.
        raw_value (str | None): Text typed into the value input.
        from_unit (str | None): Selected source unit.
        to_unit (str | None): Selected target unit.

    Returns:
        tuple: (result text, unit caption, alert message, alert open flag, conversion table rows).
            On failure the result resets to "0", the alert opens with the failure message and
            the table is emptied.
    """
    if not n_clicks:
        raise dash.exceptions.PreventUpdate

    try:
        result = converter.convert(raw_value, from_unit, to_unit)
        table = converter.conversion_table(raw_value, from_unit)
    except ConversionError as e:
        logger.info(f"Conversion rejected: {e}")
        return (
            converter.format_result(None),
            unit_caption(to_unit),
            e.user_message,
            True,
            [],
        )

    return (
        converter.format_result(result),
        unit_caption(to_unit),
        "",
        False,
        table.to_dict("records"),
    )


def configure_logging(environ=None):
    """
    Configure root logging from LOG_LEVEL (default INFO).

    Called when the page is run as a script, so importing the module leaves logging alone.

    Returns:
        int: The logging level that was applied.
    """
    environ = os.environ if environ is None else environ
    log_level_name = environ.get("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s:%(name)s: line: %(lineno)d, %(message)s",
    )
    logger.debug(f"Logging configured with level: {log_level_name}")
    return log_level


def server_settings(environ=None):
    """
    Read the server address, port, debug flag and production mode from the environment.

    PRODUCTION_MODE wins over ENVIRONMENT; when neither is set, any port other than
    the Dash default 8050 counts as production. Production binds every interface
    with debug off.

    Returns:
        dict: Keys "host", "port", "debug" and "production".
    """
    environ = os.environ if environ is None else environ
    port = int(environ.get("PORT", 8050))
    debug = environ.get("DEBUG", "").lower() in ("true", "1", "yes")

    env_production = environ.get("PRODUCTION_MODE", "").lower()
    env_environment = environ.get("ENVIRONMENT", "").lower()
    if env_production:
        production = env_production in ("true", "1", "yes")
    elif env_environment:
        production = env_environment == "production"
    else:
        production = port != 8050

    if production:
        return {"host": "0.0.0.0", "port": port, "debug": False, "production": True}
    return {
        "host": environ.get("CONVERTER_ADDR", "localhost"),
        "port": port,
        "debug": debug,
        "production": False,
    }


##################################################################
# Run the app
if __name__ == "__main__":
    configure_logging()
    settings = server_settings()
    logger.info(
        f"Starting {'production' if settings['production'] else 'development'} server "
        f"at http://{settings['host']}:{settings['port']}, debug={settings['debug']}"
    )
    app.run(host=settings["host"], port=settings["port"], debug=settings["debug"])
