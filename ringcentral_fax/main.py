"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or runs one fax command from the shell.
"""

import argparse
import json
import sys

import uvicorn

from ringcentral_fax.adapters import RingCentralFaxError
from ringcentral_fax.bootstrap import bootstrap_create_application, bootstrap_create_runtime
from ringcentral_fax.config import config_load_settings
from ringcentral_fax.observability import setup_logging


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="RingCentral fax bridge runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "send-fax", "authorization-url"),
        help="Runtime command: `api` starts server, `send-fax` sends one fax, "
        "`authorization-url` prints the OAuth login URL",
        type=str,
    )
    argument_parser.add_argument("--to", dest="to", type=str, help="Destination phone number for `send-fax`")
    argument_parser.add_argument(
        "--file",
        dest="files",
        action="append",
        type=str,
        help="File path to attach for `send-fax`; repeat to attach several files in order",
    )
    argument_parser.add_argument("--text", dest="text", type=str, help="Optional cover page text for `send-fax`")
    argument_parser.add_argument("--state", dest="state", type=str, help="Optional OAuth state for `authorization-url`")
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    setup_logging(level=settings.log_level, fmt=settings.log_format)

    if parsed_arguments.command == "api":
        application = bootstrap_create_application()
        uvicorn.run(
            application,
            host=settings.application_host,
            port=settings.application_port,
        )
        return

    _, fax_adapter = bootstrap_create_runtime(settings)
    try:
        if parsed_arguments.command == "authorization-url":
            print(fax_adapter.adapter_authorization_url(state=parsed_arguments.state))
            return

        response_body = fax_adapter.adapter_send(
            to=parsed_arguments.to,
            files=parsed_arguments.files,
            text=parsed_arguments.text,
        )
        print(json.dumps(response_body, indent=2))
    except RingCentralFaxError as error:
        print(f"ERROR: {error}", file=sys.stderr)
        raise SystemExit(1) from error
    finally:
        fax_adapter.adapter_close()


if __name__ == "__main__":
    main()
