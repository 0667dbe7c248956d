import asyncio
import socket


def enable_keepalive(writer: asyncio.StreamWriter, period: float) -> bool:
    """
    Turn on TCP keep-alive for the socket behind ``writer``.

    ``period`` is used for both the idle time before the first probe and the
    interval between probes. Returns False when the transport has no socket
    or the platform rejects the options.
    """
    sock = writer.get_extra_info("socket")
    if sock is None:
        return False

    seconds = max(1, int(period))

    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)

        if hasattr(socket, "TCP_KEEPIDLE"):
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, seconds)

        elif hasattr(socket, "TCP_KEEPALIVE"):
            # macOS names the idle option TCP_KEEPALIVE
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPALIVE, seconds)

        if hasattr(socket, "TCP_KEEPINTVL"):
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, seconds)

    except OSError:
        return False

    return True
