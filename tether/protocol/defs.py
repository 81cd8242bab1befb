# tether/protocol/defs.py
"""
Wire constants of the tether line protocol.

Inbound grammar: ``<NAME> <arg>*`` terminated by FRAME_TERMINATOR, tokens
separated by TOKEN_DELIMITER. Outbound frames are raw command text plus the
terminator.
"""
from __future__ import annotations

FRAME_TERMINATOR = "\n"
TOKEN_DELIMITER = " "

#: Inactivity window after which a connected link is declared lost.
LINK_TIMEOUT_S = 3.0

#: POS arguments arrive as integers; divide to get centimetres.
POSITION_DIVISOR = 100.0

CMD_POSITION = "POS"
CMD_ACK = "AOK"
CMD_ERROR = "ERROR"

#: Button command name -> button id.
BUTTON_COMMANDS = {
    "BTN_1": 1,
    "BTN_2": 2,
}

#: Upper bound for an unterminated trailing fragment in the receive buffer.
MAX_FRAGMENT = 4096
