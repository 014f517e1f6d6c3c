"""Order payloads accepted by the Kite order endpoints."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

TransactionType = Literal["BUY", "SELL"]
Product = Literal["CNC", "MIS", "NRML", "CO", "BO"]
OrderType = Literal["MARKET", "LIMIT", "SL", "SL-M"]
Validity = Literal["DAY", "IOC", "TTL"]


class _OrderParams(BaseModel):
    def to_params(self) -> Dict[str, Any]:
        """Keyword arguments for the KiteConnect call; unset fields are left out."""
        return self.model_dump(exclude_none=True)


class OrderRequest(_OrderParams):
    """A new order. ``variety`` selects the endpoint and is passed separately."""
    variety: str = Field(default="regular", exclude=True)
    exchange: str
    tradingsymbol: str
    transaction_type: TransactionType
    quantity: int = Field(gt=0)
    product: Product
    order_type: OrderType
    price: Optional[float] = None
    trigger_price: Optional[float] = None
    validity: Optional[Validity] = None
    disclosed_quantity: Optional[int] = None
    tag: Optional[str] = Field(default=None, max_length=20)


class OrderModification(_OrderParams):
    """Fields that may change on an open order."""
    quantity: Optional[int] = Field(default=None, gt=0)
    price: Optional[float] = None
    trigger_price: Optional[float] = None
    order_type: Optional[OrderType] = None
    validity: Optional[Validity] = None
    disclosed_quantity: Optional[int] = None
