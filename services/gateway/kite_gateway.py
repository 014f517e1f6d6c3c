# services/gateway/kite_gateway.py

"""Authenticated access to the Kite Connect v3 REST API."""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests
from kiteconnect import KiteConnect
from kiteconnect.exceptions import KiteException

from core.config.settings import Settings
from services.auth.models import Credential
from .exceptions import KiteAPIError
from .models import OrderModification, OrderRequest

logger = logging.getLogger(__name__)


class KiteGateway:
    """Holds one resolved credential and issues every downstream API call.

    Calls go through a single KiteConnect handle. Each method is one
    round-trip with the configured timeout; failures surface as KiteAPIError
    and are never retried.
    """

    def __init__(
        self,
        credential: Credential,
        base_url: str = "https://api.kite.trade",
        timeout_ms: int = 30000,
        kite: Optional[KiteConnect] = None,
    ):
        if not credential.has_usable_token():
            raise ValueError("KiteGateway requires a resolved access token")

        self.credential = credential
        self.base_url = base_url.rstrip("/")
        self.kite = kite or KiteConnect(
            api_key=credential.api_key,
            root=self.base_url,
            timeout=timeout_ms / 1000.0,
        )
        self.kite.set_access_token(credential.access_token)

    @classmethod
    def from_settings(cls, settings: Settings, credential: Credential,
                      kite: Optional[KiteConnect] = None) -> "KiteGateway":
        return cls(credential, base_url=settings.base_url,
                   timeout_ms=settings.request_timeout, kite=kite)

    def _call(self, operation: str, method: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return method(*args, **kwargs)
        except KiteException as e:
            error_type = type(e).__name__
            logger.error(f"Kite API call failed: {operation}: {error_type} ({e.code})")
            raise KiteAPIError(
                f"Failed to {operation}: Zerodha API Error: {e.code} - {e}",
                status_code=e.code,
                error_type=error_type,
            ) from e
        except requests.RequestException as e:
            logger.error(f"Kite request failed: {operation}: {type(e).__name__}")
            raise KiteAPIError(f"Failed to {operation}: {e}") from e

    # --- user ---

    def get_profile(self) -> Dict[str, Any]:
        return self._call("fetch profile", self.kite.profile)

    def get_margins(self, segment: Optional[str] = None) -> Dict[str, Any]:
        return self._call("fetch margins", self.kite.margins, segment=segment)

    # --- market data ---

    def get_quote(self, instruments: Sequence[str]) -> Dict[str, Any]:
        """Full quotes keyed by ``EXCHANGE:TRADINGSYMBOL``."""
        return self._call("fetch quotes", self.kite.quote, list(instruments))

    def get_ohlc(self, instruments: Sequence[str]) -> Dict[str, Any]:
        return self._call("fetch OHLC", self.kite.ohlc, list(instruments))

    def get_ltp(self, instruments: Sequence[str]) -> Dict[str, Any]:
        return self._call("fetch LTP", self.kite.ltp, list(instruments))

    def get_historical_data(
        self,
        instrument_token: int | str,
        interval: str,
        from_date: Any,
        to_date: Any,
        continuous: bool = False,
        oi: bool = False,
    ) -> List[Dict[str, Any]]:
        """Candles between two dates; each candle is a dict with a parsed ``date``."""
        return self._call(
            "fetch historical data",
            self.kite.historical_data,
            instrument_token,
            from_date,
            to_date,
            interval,
            continuous=continuous,
            oi=oi,
        )

    def get_instruments(self, exchange: Optional[str] = None) -> List[Dict[str, Any]]:
        """Instrument master for one exchange, or all exchanges when omitted."""
        return self._call("fetch instruments", self.kite.instruments, exchange=exchange)

    # --- portfolio ---

    def get_positions(self) -> Dict[str, List[Dict[str, Any]]]:
        """Net and day positions."""
        return self._call("fetch positions", self.kite.positions)

    def get_holdings(self) -> List[Dict[str, Any]]:
        return self._call("fetch holdings", self.kite.holdings)

    # --- orders ---

    def get_orders(self) -> List[Dict[str, Any]]:
        return self._call("fetch orders", self.kite.orders)

    def get_order_history(self, order_id: str) -> List[Dict[str, Any]]:
        return self._call("fetch order history", self.kite.order_history, order_id)

    def place_order(self, order: OrderRequest) -> Dict[str, Any]:
        logger.info(f"Placing {order.transaction_type} {order.quantity} "
                    f"{order.exchange}:{order.tradingsymbol} ({order.variety})")
        order_id = self._call("place order", self.kite.place_order,
                              variety=order.variety, **order.to_params())
        return {"order_id": order_id}

    def modify_order(self, order_id: str, changes: OrderModification,
                     variety: str = "regular") -> Dict[str, Any]:
        order_id = self._call("modify order", self.kite.modify_order,
                              variety=variety, order_id=order_id, **changes.to_params())
        return {"order_id": order_id}

    def cancel_order(self, order_id: str, variety: str = "regular") -> Dict[str, Any]:
        order_id = self._call("cancel order", self.kite.cancel_order,
                              variety=variety, order_id=order_id)
        return {"order_id": order_id}

    def get_trades(self) -> List[Dict[str, Any]]:
        return self._call("fetch trades", self.kite.trades)

    def get_order_trades(self, order_id: str) -> List[Dict[str, Any]]:
        return self._call("fetch order trades", self.kite.order_trades, order_id)

    # --- lifecycle ---

    def close(self) -> None:
        self.kite.reqsession.close()

    def __enter__(self) -> "KiteGateway":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
