import socket

"""Network helper utilities for the Availability Poll.

The poll is meant to be opened by several people at once, so startup prints
the LAN address next to the localhost one.
"""


def get_local_ip(probe_host: str = "8.8.8.8", probe_port: int = 80) -> str:
    """Return the address of the interface used to reach probe_host, or '127.0.0.1'.

    Connecting a UDP socket only asks the OS for a route; nothing is sent.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect((probe_host, probe_port))
        ip = str(s.getsockname()[0])
    except OSError:
        ip = "127.0.0.1"
    finally:
        s.close()
    return ip


def share_urls(port: int) -> list:
    """URLs to hand out to participants: localhost first, then the LAN address when there is one."""
    urls = [f"http://localhost:{port}"]
    local_ip = get_local_ip()
    if local_ip not in ("127.0.0.1", "localhost"):
        urls.append(f"http://{local_ip}:{port}")
    return urls
