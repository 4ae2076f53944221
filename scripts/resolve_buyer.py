"""Resolve the buyer of one or more swap transactions against a live node.

Usage:
    PYTHONPATH=src python scripts/resolve_buyer.py 0x<tx_hash> [0x<tx_hash> ...]

Reads RPC_URL / TOKEN_ADDRESS / POOL_ADDRESSES from the environment (or .env).
"""

import asyncio
import logging
import sys

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


async def main(tx_hashes: list[str]) -> None:
    from buywatch.container import Container
    from buywatch.infra.blockchain.abi import to_checksum
    from buywatch.parser.logs import SWAP_TOPIC, decode_swap, to_chain_log

    container = Container()
    settings = container.settings()
    rpc = container.rpc()
    resolver = container.resolver()
    pools = set(settings.pools)

    try:
        for tx_hash in tx_hashes:
            receipt = await rpc.get_transaction_receipt(tx_hash)
            if receipt is None:
                print(f"{tx_hash}: not found")
                continue
            swaps = [
                decode_swap(to_chain_log(raw))
                for raw in receipt.get("logs") or []
                if raw.get("address", "").lower() in pools and (raw.get("topics") or [""])[0].lower() == SWAP_TOPIC
            ]
            if not swaps:
                print(f"{tx_hash}: no swap in watched pools")
                continue
            context = await resolver.load_context(tx_hash)
            for swap in swaps:
                buyer = to_checksum(await resolver.resolve_in_context(context, swap))
                print(f"{tx_hash}: pool {swap.pool_address} amount0={swap.amount0} amount1={swap.amount1}")
                for addr, delta in context.balance_deltas().items():
                    print(f"    {addr}  {delta:+d}")
                print(f"    buyer -> {buyer}")
    finally:
        await container.http_client().close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1:]))
