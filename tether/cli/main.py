# tether/cli/main.py
from __future__ import annotations

from typing import Optional

from tether.core.errors import TetherError

from tether.cli.args import parse_args
from tether.cli.commands import (
    cmd_monitor,
    cmd_send,
    cmd_transports,
    configure_logging,
)


def main(argv: Optional[list[str]] = None) -> int:
    try:
        args, tindex, transport_type_id, address, overrides = parse_args(argv)
        configure_logging(verbose=args.verbose, log_file=args.log_file)

        if args.cmd == "transports":
            return cmd_transports(tindex=tindex)

        assert transport_type_id is not None

        if args.cmd == "monitor":
            return cmd_monitor(
                args,
                transport_type_id=transport_type_id,
                address=address,
                transport_overrides=overrides,
            )
        if args.cmd == "send":
            return cmd_send(
                args,
                transport_type_id=transport_type_id,
                address=address,
                transport_overrides=overrides,
            )

        return 2
    except TetherError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1
