"""python -m utopia METHOD [key=value ...]"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from utopia.client.client import UtopiaClient
from utopia.errors import UtopiaError
from utopia.methods import list_methods


def _parse_params(pairs: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise SystemExit(f"expected key=value, got {pair!r}")
        params[key] = value
    return params


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m utopia",
        description="Call the Utopia API. Connection settings come from UTOPIA_* variables.",
    )
    parser.add_argument("method", nargs="?", help="wrapped method name, e.g. get_contacts")
    parser.add_argument("params", nargs="*", metavar="key=value")
    parser.add_argument("--raw", action="store_true", help="METHOD is a remote method name; params are sent as given")
    parser.add_argument("--list", action="store_true", help="print the wrapped method names and exit")
    parser.add_argument("--listen", nargs="?", const="any", metavar="CATEGORY", help="print notification events")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if args.list:
        print("\n".join(list_methods()))
        return 0

    try:
        params = _parse_params(args.params)
        if args.listen:
            with UtopiaClient.from_env(notifications=True) as client:
                if not client.notifications_available:
                    print("notifications are not available", file=sys.stderr)
                    return 1
                try:
                    for event in client.events(args.listen):
                        print(json.dumps(event.payload), flush=True)
                except KeyboardInterrupt:
                    pass
            return 0

        if not args.method:
            parser.error("METHOD is required")
        with UtopiaClient.from_env() as client:
            if args.raw:
                result = client.send_request(args.method, params)
            else:
                result = client.call(args.method, **params)
    except (UtopiaError, KeyError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
