#
#
#

"""Protocol definitions for request payloads.

Structural typing (PEP 544) lets the client stamp credentials onto and
encode any payload without knowing its concrete shape.
"""

from typing import Dict, Protocol


class CredentialCarrier(Protocol):
    """Anything the client can POST.

    The client sets both keys immediately before encoding the payload; the
    payload decides how its own fields are laid out on the wire.
    """

    def set_api_key(self, api_key: str) -> None:
        ...

    def set_secret_api_key(self, secret_api_key: str) -> None:
        ...

    def to_wire(self) -> Dict:
        """Return the JSON-serializable body, credential fields included."""
        ...
