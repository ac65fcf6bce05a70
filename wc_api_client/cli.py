"""CLI entry point for wc-api-client.

Subcommands:
    call            Perform one API call against a configured store
    sign            Print the OAuth parameters and signature for a request
    list-endpoints  Show the built-in endpoint catalog
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wc_api_client.models import HashAlgorithm, HttpMethod, OutputMode

METHOD_CHOICES = [m.value for m in HttpMethod]


def parse_param(value: str) -> tuple[str, str]:
    """Parse KEY=VALUE format.

    Returns:
        Tuple of (key, value). The value may be empty.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if "=" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid format '{value}'. Expected KEY=VALUE (e.g., 'filter[limit]=5')"
        )
    key, param_value = value.split("=", 1)
    if not key:
        raise argparse.ArgumentTypeError(f"Invalid format '{value}'. Key cannot be empty.")
    return (key, param_value)


def parse_json_object(value: str) -> dict[str, Any]:
    """Parse a JSON object argument.

    Raises:
        argparse.ArgumentTypeError: If value is not a JSON object.
    """
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid JSON: {e}")
    if not isinstance(data, dict):
        raise argparse.ArgumentTypeError("JSON data must be an object")
    return data


def _build_params(pairs: list[tuple[str, str]]) -> dict[str, str]:
    """Build a parameter dict, warning on duplicates."""
    result: dict[str, str] = {}
    for key, value in pairs:
        if key in result:
            print(
                f"Warning: --param '{key}' specified multiple times, using last value",
                file=sys.stderr,
            )
        result[key] = value
    return result


@dataclass
class CallArgs:
    """Parsed arguments for call mode."""

    config: Path
    store: str
    endpoint: str
    method: str
    params: dict[str, str]
    data: dict[str, Any] | None
    output: str | None
    show_headers: bool
    verbose: bool = False


@dataclass
class SignArgs:
    """Parsed arguments for sign mode."""

    store_url: str
    consumer_key: str
    consumer_secret: str
    endpoint: str
    method: str
    params: dict[str, str] = field(default_factory=dict)
    timestamp: int | None = None
    nonce: str | None = None
    algorithm: str = HashAlgorithm.SHA256.value
    verbose: bool = False


@dataclass
class ListEndpointsArgs:
    """Parsed arguments for list-endpoints mode."""

    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with call, sign and list-endpoints subcommands."""
    parser = argparse.ArgumentParser(
        prog="wc-api",
        description="Client for the WooCommerce REST API (wc-api/v2).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log request details to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Mode")

    # Call subcommand
    call_parser = subparsers.add_parser(
        "call",
        help="Perform one API call against a store from the config file",
    )
    call_parser.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Path to store configuration file (YAML)",
    )
    call_parser.add_argument(
        "--store",
        type=str,
        required=True,
        help="Name of the store (must exist in config)",
    )
    call_parser.add_argument(
        "endpoint",
        type=str,
        help="Endpoint relative to the API URL, e.g. 'orders' or 'products/12'",
    )
    call_parser.add_argument(
        "--method",
        type=str.upper,
        choices=METHOD_CHOICES,
        default="GET",
        help="HTTP method (default: GET)",
    )
    call_parser.add_argument(
        "--param",
        type=parse_param,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Request parameter (can be repeated)",
    )
    call_parser.add_argument(
        "--data",
        type=parse_json_object,
        default=None,
        metavar="JSON",
        help="JSON object sent as the body of POST/PUT requests",
    )
    call_parser.add_argument(
        "--output",
        choices=[OutputMode.MAP.value, OutputMode.STRING.value],
        default=None,
        help="Print the decoded JSON (map) or the raw body (string)",
    )
    call_parser.add_argument(
        "--show-headers",
        action="store_true",
        default=False,
        dest="show_headers",
        help="Print response headers and pagination links to stderr",
    )

    # Sign subcommand
    sign_parser = subparsers.add_parser(
        "sign",
        help="Print the OAuth query parameters for a request without sending it",
    )
    sign_parser.add_argument("--store-url", required=True, dest="store_url", help="Store base URL")
    sign_parser.add_argument("--consumer-key", required=True, dest="consumer_key", help="Consumer key")
    sign_parser.add_argument(
        "--consumer-secret", required=True, dest="consumer_secret", help="Consumer secret"
    )
    sign_parser.add_argument(
        "endpoint",
        type=str,
        help="Endpoint relative to the API URL",
    )
    sign_parser.add_argument(
        "--method",
        type=str.upper,
        choices=METHOD_CHOICES,
        default="GET",
        help="HTTP method (default: GET)",
    )
    sign_parser.add_argument(
        "--param",
        type=parse_param,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter included in the signature (can be repeated)",
    )
    sign_parser.add_argument(
        "--timestamp",
        type=int,
        default=None,
        help="Fixed oauth_timestamp (default: now)",
    )
    sign_parser.add_argument(
        "--nonce",
        type=str,
        default=None,
        help="Fixed oauth_nonce (default: random)",
    )
    sign_parser.add_argument(
        "--algorithm",
        choices=[a.value for a in HashAlgorithm],
        default=HashAlgorithm.SHA256.value,
        help="HMAC digest (default: SHA256)",
    )

    # List-endpoints subcommand
    subparsers.add_parser(
        "list-endpoints",
        help="List the built-in endpoint catalog",
    )

    return parser


def parse_args(args: list[str] | None = None) -> CallArgs | SignArgs | ListEndpointsArgs:
    """Parse command-line arguments and return typed args dataclass.

    Args:
        args: Command-line arguments to parse. If None, uses sys.argv[1:].

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "call":
        return CallArgs(
            config=namespace.config,
            store=namespace.store,
            endpoint=namespace.endpoint,
            method=namespace.method,
            params=_build_params(namespace.param or []),
            data=namespace.data,
            output=namespace.output,
            show_headers=namespace.show_headers,
            verbose=namespace.verbose,
        )
    elif namespace.command == "sign":
        return SignArgs(
            store_url=namespace.store_url,
            consumer_key=namespace.consumer_key,
            consumer_secret=namespace.consumer_secret,
            endpoint=namespace.endpoint,
            method=namespace.method,
            params=_build_params(namespace.param or []),
            timestamp=namespace.timestamp,
            nonce=namespace.nonce,
            algorithm=namespace.algorithm,
            verbose=namespace.verbose,
        )
    elif namespace.command == "list-endpoints":
        return ListEndpointsArgs(verbose=namespace.verbose)
    else:
        # Should not happen with required=True on subparsers
        parser.error(f"Unknown command: {namespace.command}")


def dispatch(parsed: CallArgs | SignArgs | ListEndpointsArgs) -> int:
    """Run the mode matching the parsed args."""
    if parsed.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    if isinstance(parsed, CallArgs):
        return run_call(parsed)
    elif isinstance(parsed, SignArgs):
        return run_sign(parsed)
    else:
        return run_list_endpoints(parsed)


def main() -> int:
    """Main entry point."""
    try:
        return dispatch(parse_args())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


def run_call(args: CallArgs) -> int:
    """Run call mode: one request, body printed to stdout."""
    from wc_api_client.client import ClientError, WCAPIClient
    from wc_api_client.config_loader import ConfigError, load_store_config, select_store

    try:
        stores = load_store_config(args.config)
        store = select_store(stores, args.store)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    if args.output is not None:
        store = store.model_copy(update={"output_mode": OutputMode(args.output)})
    elif store.output_mode is OutputMode.OBJECT:
        # Attribute records can't be printed as JSON
        store = store.model_copy(update={"output_mode": OutputMode.MAP})

    params: dict[str, Any] = dict(args.params)
    if args.data is not None:
        if args.method in ("POST", "PUT"):
            params.update(args.data)
        else:
            print(f"Warning: --data is ignored for {args.method} requests", file=sys.stderr)

    try:
        with WCAPIClient.from_store_config(store) as client:
            result = client.execute(args.endpoint, params, args.method)
    except ClientError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.show_headers:
        for name, value in result.envelope.headers.items():
            for item in value if isinstance(value, list) else [value]:
                print(f"{name}: {item}", file=sys.stderr)
        for rel, url in result.envelope.links.items():
            print(f"[link] {rel}: {url}", file=sys.stderr)

    if store.output_mode is OutputMode.STRING:
        print(result.data)
    else:
        print(json.dumps(result.data, indent=2))

    return 1 if result.is_error else 0


def run_sign(args: SignArgs) -> int:
    """Run sign mode: print the query parameters a signed request would carry."""
    from wc_api_client.client import build_api_url
    from wc_api_client.oauth import build_oauth_params, generate_oauth_signature

    algorithm = HashAlgorithm(args.algorithm)
    oauth_params = build_oauth_params(
        args.consumer_key, algorithm, timestamp=args.timestamp, nonce=args.nonce
    )

    signed: dict[str, str] = dict(args.params) if args.method == "GET" else {}
    signed.update(oauth_params)
    endpoint_url = build_api_url(args.store_url) + args.endpoint
    signature = generate_oauth_signature(
        signed, args.method, endpoint_url, args.consumer_secret, algorithm
    )
    signed["oauth_signature"] = signature

    for key, value in signed.items():
        print(f"{key}={value}")
    return 0


def run_list_endpoints(args: ListEndpointsArgs) -> int:
    """Run list-endpoints mode."""
    from wc_api_client.endpoints import ENDPOINTS

    for name, (method, path) in ENDPOINTS.items():
        print(f"{method:<7} /{path:<32} {name}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
