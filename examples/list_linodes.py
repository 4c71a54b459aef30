#!/usr/bin/env python3
from dotenv import load_dotenv

from linodebatch import Client
from linodebatch.utils.logging import setup_logging

load_dotenv()


def main() -> None:
    """List linodes, then fetch the IPs of all of them in batched requests."""
    client = Client.from_env()
    linodes = client.linode_list()
    ips_by_linode = client.linode_ip_list([linode.id for linode in linodes])
    for linode in linodes:
        addresses = ", ".join(ip.ip for ip in ips_by_linode.get(linode.id, []))
        print(f"[{linode.display_group}] {linode.label}: {addresses or 'no IP'}")


if __name__ == "__main__":
    setup_logging(verbose=True)
    main()
