import ipaddress
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MasterAddress:
    """Transport address of a node, as seen by the socket that probed it."""

    host: str
    port: int

    @classmethod
    def from_peername(cls, peername: tuple | None) -> "MasterAddress | None":
        if not peername:
            return None

        # IPv6 peernames carry (host, port, flowinfo, scope_id).
        host, port = peername[0], peername[1]
        return cls(host=host, port=port)

    @property
    def packed(self) -> bytes:
        try:
            return ipaddress.ip_address(self.host).packed

        except ValueError:
            return self.host.encode()

    def same_as(self, other: "MasterAddress | None") -> bool:
        """Compare by IP bytes and port, so textual forms of one IP match."""
        if other is None:
            return False

        return self.packed == other.packed and self.port == other.port

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"

        return f"{self.host}:{self.port}"
