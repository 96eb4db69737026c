#!/usr/bin/env python3
"""
Browse a ZooKeeper namespace from the command line.

This example demonstrates:
- Connecting through the HTTP proxy (or a direct session with --session)
- Revealing a path and printing the tree the way a sidebar shows it
- Reading a node's data and stat
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from keepertree import AccessConfig, AccessError, TransportMode
from keepertree.aio import KeeperBrowser


async def main():
    """Open a connection, reveal a path and show its details."""
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    mode = TransportMode.SESSION if "--session" in sys.argv else TransportMode.HTTP
    url = args[0] if args else "localhost:12345"
    target = args[1] if len(args) > 1 else "/"

    config = AccessConfig(url=url, mode=mode)
    print(f"Connecting to {config.url} ({mode.value})")
    print("-" * 50)

    async with KeeperBrowser() as browser:
        try:
            await browser.open(config)
            if target != "/":
                await browser.tree.reveal(target)
            node = await browser.select(target)
        except AccessError as e:
            print(f"Error [{e.kind.value}]: {e.message}")
            return 1

        for depth, tree_node in browser.tree.snapshot.visible_nodes():
            marker = "-" if tree_node.expanded else "+"
            if not tree_node.may_have_children:
                marker = " "
            print(f"{'  ' * depth}{marker} {tree_node.display_name}")

        print(f"\n{node.path}")
        print(f"  data:     {node.data!r}")
        print(f"  version:  {node.stat.version}")
        print(f"  children: {node.stat.num_children}")
        if node.stat.is_ephemeral:
            print(f"  ephemeral owner: {node.stat.ephemeral_owner:#x}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    sys.exit(asyncio.run(main()))
