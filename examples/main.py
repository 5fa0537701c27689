import argparse
import asyncio
import sys
import time
from decimal import Decimal
from pathlib import Path

from relay_trader import RelayClient
from relay_trader.utils.enums import NetworkId, Side

from PaperWallet import PaperAccount, PaperProtocol, PaperProvider


async def main(config_path: str | None, network: str, market_id: str | None, log_level: str = "INFO"):
    """
    Initialize a client against the live relay API with a paper wallet.
    """
    #########################
    ### Initialize Client ###
    #########################
    network_id = NetworkId[network.upper()]
    client = RelayClient(
        wallet=PaperAccount,
        provider=PaperProvider(network_id=network_id),
        protocol_factory=PaperProtocol,
        config_path=config_path,
        network_id=network_id,
        log_level=log_level,
    )

    try:
        await client.initialize()
        client.logger.info(f"Markets available: {', '.join(sorted(client.markets))}")

        ###########################
        ### Place a paper order ###
        ###########################
        if market_id:
            market = client.get_market(market_id)
            signed = await market.limit_order(
                Side.BUY,
                market.min_order_size or Decimal("1"),
                Decimal("0.0001"),
                int(time.time()) + 3600,
            )
            client.logger.info(f"Paper order signed: {signed['signature']}")
    finally:
        client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Relay client initialization demo")
    parser.add_argument("--config", dest="config_path", default=None, help="Path to config file (YAML)")
    parser.add_argument("--network", default="mainnet", choices=["mainnet", "kovan"])
    parser.add_argument("--market", default=None, help="Market id to place a paper limit order on, e.g. WETH-DAI")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args()

    if args.config_path and not Path(args.config_path).exists():
        print(f"Error: Config file not found: {args.config_path}")
        sys.exit(1)

    try:
        asyncio.run(main(
            config_path=args.config_path,
            network=args.network,
            market_id=args.market,
            log_level=args.log_level,
        ))
    except KeyboardInterrupt:
        print("Stopped by user")
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
