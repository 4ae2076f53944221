from pydantic_settings import BaseSettings, SettingsConfigDict

# PBTC / USDT on Base
DEFAULT_POOL = "0xc3fd337dfc5700565a5444e3b0723920802a426d"
BASE_USDT = "0xfde4c96c8593536e31f229ea8f37b2ada2699bb2"
UNISWAP_V3_FACTORY_BASE = "0x33128a8fc17869897dce68ed026d694621f6fdfd"
PBTC_DEPLOY_BLOCK = 29988806


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    telegram_bot_token: str
    telegram_chat_ids: str  # comma-separated
    rpc_url: str
    token_address: str

    token_symbol: str = "PBTC"
    token_decimals: int = 18
    fallback_total_supply: int = 100_000_000

    quote_token_address: str = BASE_USDT
    quote_symbol: str = "USDT"
    quote_decimals: int = 6

    pool_addresses: str = DEFAULT_POOL  # comma-separated
    factory_address: str = UNISWAP_V3_FACTORY_BASE  # empty disables pool discovery

    staking_contract_address: str = ""
    staked_function: str = "staked(address)"

    start_block: int | None = None
    poll_interval_seconds: float = 10.0
    max_block_span: int = 500
    holder_start_block: int | None = PBTC_DEPLOY_BLOCK  # None = start at head
    holder_interval_seconds: float = 6 * 60 * 60
    holder_check_delay_seconds: float = 0.1

    min_usd: float = 10.0
    send_delay_seconds: float = 0.3
    images_dir: str = "images"
    explorer_url: str = "https://basescan.org"
    chart_url: str = ""
    buy_url: str = ""

    rpc_rate_per_second: float = 10.0
    rpc_timeout_seconds: float = 15.0

    log_level: str = "INFO"

    @property
    def chat_ids(self) -> list[str]:
        return _split_csv(self.telegram_chat_ids)

    @property
    def pools(self) -> list[str]:
        return [p.lower() for p in _split_csv(self.pool_addresses)]
