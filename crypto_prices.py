import logging
from enum import Enum

import requests

import config

logger = logging.getLogger(__name__)

# User-facing symbol -> CoinGecko coin id
SYMBOL_TO_ID = {
    "btc": "bitcoin",
    "eth": "ethereum",
    "usdt": "tether",
    "usdc": "usd-coin",
    "bnb": "binancecoin",
    "sol": "solana",
    "xrp": "ripple",
    "doge": "dogecoin",
    "ada": "cardano",
}


class PriceError(Enum):
    RATE_LIMIT = "RATE_LIMIT"
    PROVIDER_ERROR = "PROVIDER_ERROR"


def symbol_to_id(symbol):
    """Map a symbol like 'BTC' to its CoinGecko id, or None if unsupported."""
    if not symbol:
        return None
    return SYMBOL_TO_ID.get(symbol.lower())


def _usd_price(entry):
    """Pull a positive USD price out of one response entry, else None."""
    if not isinstance(entry, dict):
        return None
    price = entry.get("usd")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return None
    return price if price > 0 else None


def fetch_prices(ids):
    """
    Fetch current USD prices for a set of CoinGecko ids in a single request.

    Returns (prices, error):
        prices -> {"bitcoin": {"usd": 50000}, ...} (ids without a price are left out)
        error  -> None, PriceError.RATE_LIMIT or PriceError.PROVIDER_ERROR
    """
    ids = sorted(set(ids))
    if not ids:
        return {}, None

    url = f"{config.COINGECKO_BASE_URL}/simple/price"
    params = {"ids": ",".join(ids), "vs_currencies": "usd"}
    headers = {"accept": "application/json"}
    if config.COINGECKO_API_KEY:
        headers["x-cg-demo-api-key"] = config.COINGECKO_API_KEY

    try:
        response = requests.get(url, params=params, headers=headers, timeout=config.PRICE_TIMEOUT)
        if response.status_code == 429:
            logger.warning("CoinGecko rate limit hit for ids=%s", params["ids"])
            return {}, PriceError.RATE_LIMIT
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as e:
        logger.warning("Error fetching prices for ids=%s: %s", params["ids"], e)
        return {}, PriceError.PROVIDER_ERROR
    except ValueError as e:
        logger.warning("CoinGecko returned invalid JSON: %s", e)
        return {}, PriceError.PROVIDER_ERROR

    if not isinstance(data, dict):
        logger.warning("Unexpected CoinGecko response: %r", data)
        return {}, PriceError.PROVIDER_ERROR

    prices = {}
    for coin_id in ids:
        price = _usd_price(data.get(coin_id))
        if price is not None:
            prices[coin_id] = {"usd": price}
    return prices, None
